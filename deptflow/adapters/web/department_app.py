"""Department web UI: a pending task dashboard backed by forwarded jobs."""

import html
import json
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse

from deptflow.adapters.camunda.client import CamundaClient
from deptflow.adapters.camunda.worker import ActiveJob, JobWorker, WorkerGroup
from deptflow.adapters.esb.client import EsbClient
from deptflow.adapters.web.task_board import TaskBoard
from deptflow.config import CONFIG
from deptflow.domain.catalog import TASKS, YES_NO, Department, TaskSpec, get_department
from deptflow.domain.parsing import now_utc, to_bool
from deptflow.domain.workflows import WORKFLOWS, promotion_variables, stock_variables
from deptflow.ports.outbound import EsbPort, OrchestratorPort

WEB_ACTOR = "Web UI User"
WORKFLOW_STARTER = "data-analysis"


def _log(msg: str):
    print(msg, file=sys.stderr)


def collect_inputs(spec: TaskSpec, body: Dict[str, Any]) -> Dict[str, Any]:
    """The submitted values for ``spec``'s fields, skipping ones whose gate is not yes."""
    inputs: Dict[str, Any] = {}
    for f in spec.fields:
        if f.depends_on and not to_bool(inputs.get(f.depends_on)):
            continue
        if f.name in body:
            inputs[f.name] = body[f.name]
    return inputs


async def complete_pending_task(
    board: TaskBoard,
    esb: EsbPort,
    spec: TaskSpec,
    job_key: str,
    body: Dict[str, Any],
) -> Dict[str, Any]:
    """Enrich through the ESB, complete the job and drop it from the board."""
    task = board.get(job_key)
    if task is None or task.task_type != spec.type:
        raise HTTPException(status_code=404, detail="Task not found")
    if await board.claim(job_key) is None:
        raise HTTPException(status_code=409, detail="Task is already being completed")

    variables = task.job.variables
    inputs = collect_inputs(spec, body)
    try:
        esb_response = await esb.call(spec.endpoint, spec.payload(variables, inputs))
        result = spec.result(variables, inputs, WEB_ACTOR, now_utc(), None)
        result["esbData"] = esb_response.get("transformed")
        await task.job.complete(result)
    except Exception as e:
        _log(f"Error completing {spec.type} task {job_key}: {e}")
        await board.release(job_key)
        raise HTTPException(status_code=500, detail=str(e))

    await board.remove(job_key, result)
    print(f"✅ {spec.title} completed: {job_key}")
    return {"success": True, "result": result}


def create_department_app(
    department: str,
    client: Optional[OrchestratorPort] = None,
    esb: Optional[EsbPort] = None,
    board: Optional[TaskBoard] = None,
    start_workers: bool = True,
) -> FastAPI:
    dept = get_department(department)
    client = client or CamundaClient()
    esb = esb or EsbClient()
    board = board or TaskBoard()
    workers = WorkerGroup()

    def make_handler(task_type: str):
        async def handler(job: ActiveJob):
            print(f"\n📥 New {task_type} task received: {job.key}")
            print(f"   Variables: {json.dumps(job.variables, indent=2, default=str)}")
            await board.add(job, task_type)
            job.forward()

        return handler

    for task_type in dept.task_types:
        workers.add(
            JobWorker(
                client,
                task_type,
                make_handler(task_type),
                timeout_ms=CONFIG["ui_job_timeout_ms"],
            )
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_workers:
            workers.start()
            print(f"{dept.icon} {dept.name} UI listening for: {', '.join(dept.task_types)}")
        yield
        await workers.stop()

    app = FastAPI(title=f"{dept.name} Department", lifespan=lifespan)
    app.state.department = dept
    app.state.board = board
    app.state.workers = workers

    @app.get("/", response_class=HTMLResponse)
    async def dashboard():
        return render_dashboard(dept, board)

    @app.get("/api/tasks")
    async def list_tasks():
        return board.list()

    @app.post("/complete-task/{task_type}")
    async def complete_task(task_type: str, body: Dict[str, Any] = Body(...)):
        spec = TASKS.get(task_type)
        if spec is None or spec.department != dept.key:
            raise HTTPException(status_code=404, detail=f"Unknown task type: {task_type}")
        job_key = body.get("jobKey")
        if job_key is None:
            raise HTTPException(status_code=404, detail="Task not found")
        return await complete_pending_task(board, esb, spec, str(job_key), body)

    if dept.key == WORKFLOW_STARTER:

        async def start(workflow: str, variables: Dict[str, Any]):
            process_id = WORKFLOWS[workflow].process_id
            try:
                instance = await client.create_process_instance(process_id, variables)
            except Exception as e:
                _log(f"Error starting {process_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))
            print(f"🚀 Started {process_id}: {instance.process_instance_key}")
            started = {
                "processInstanceKey": instance.process_instance_key,
                "bpmnProcessId": instance.bpmn_process_id or process_id,
                "version": instance.version,
            }
            await board.connections.broadcast("workflow-started", {**started, "workflowType": workflow})
            return {"success": True, **started}

        @app.post("/start-workflow")
        async def start_workflow(body: Optional[Dict[str, Any]] = Body(None)):
            body = body or {}
            variables = promotion_variables(
                now_utc(),
                initiator="Data Analysis Web UI",
                reason=body.get("reason") or "Triggered from Web UI",
            )
            return await start("promotion", variables)

        @app.post("/start-stock-workflow")
        async def start_stock_workflow(body: Optional[Dict[str, Any]] = Body(None)):
            body = body or {}
            variables = stock_variables(
                now_utc(),
                product_id=body.get("productId"),
                alert_source=body.get("alertSource"),
                initiator="Data Analysis Web UI",
                reason=body.get("reason") or "Stock replenishment triggered from Web UI",
            )
            return await start("stock", variables)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await board.connections.connect(websocket)
        try:
            await board.connections.send(websocket, "initial-tasks", board.list())
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            board.connections.disconnect(websocket)

    return app


# ── Dashboard page ─────────────────────────────────────


def _field_input(f) -> str:
    name = html.escape(f.name)
    if f.kind == YES_NO:
        return f'<select name="{name}"><option value="yes">yes</option><option value="no">no</option></select>'
    input_type = "number" if f.kind == "number" else "text"
    step = ' step="any"' if input_type == "number" else ""
    return f'<input type="{input_type}"{step} name="{name}" placeholder="{html.escape(f.default)}">'


def _task_card(task: Dict[str, Any]) -> str:
    spec = TASKS[task["taskType"]]
    variables = task["variables"] or {}
    shown = "".join(
        f"<li><strong>{html.escape(label)}:</strong> "
        f"{html.escape(json.dumps(variables.get(key, 'N/A'), default=str))}</li>"
        for label, key in spec.shows
    )
    fields = "".join(
        f'<label>{html.escape(f.prompt)}{_field_input(f)}</label>'
        for f in spec.fields
    )
    decision = ""
    if spec.decision_question:
        decision = f'<p class="decision">⚠️ {html.escape(spec.decision_question)}</p>'
    return f"""
      <div class="task">
        <h3>{html.escape(spec.title)}</h3>
        <p class="meta">Job {html.escape(task["jobKey"])} · received {html.escape(task["receivedAt"])}</p>
        <ul>{shown}</ul>
        {decision}
        <form data-type="{html.escape(spec.type)}" data-key="{html.escape(task["jobKey"])}" onsubmit="event.preventDefault(); completeTask(this);">
          {fields}
          <button type="submit">Complete task</button>
        </form>
      </div>
    """


def render_dashboard(dept: Department, board: TaskBoard) -> str:
    tasks = board.list()
    cards = "".join(_task_card(t) for t in tasks) or '<p class="empty">No pending tasks.</p>'
    starters = ""
    if dept.key == WORKFLOW_STARTER:
        starters = """
        <div class="starters">
          <button onclick="startWorkflow('/start-workflow')">Start promotion workflow</button>
          <input id="productId" placeholder="Product ID (e.g., SKU-12345)">
          <button onclick="startWorkflow('/start-stock-workflow')">Start stock workflow</button>
        </div>
        """

    return f"""
    <html>
      <head>
        <title>{html.escape(dept.name)}</title>
        <style>
          body {{ font-family: monospace; max-width: 900px; margin: 40px auto; }}
          .task {{ background: #e8f5e9; padding: 16px; border-radius: 5px; margin-bottom: 12px; }}
          .meta {{ color: #666; }}
          .decision {{ background: #fff3e0; padding: 8px; border-radius: 4px; }}
          label {{ display: block; margin: 6px 0; }}
          input, select {{ margin-left: 8px; }}
          button {{ padding: 8px 16px; margin: 5px 0; }}
        </style>
      </head>
      <body>
        <h1>{dept.icon} {html.escape(dept.name)} Department</h1>
        <p>Pending tasks: <strong id="count">{len(tasks)}</strong></p>
        {starters}
        <div id="tasks">{cards}</div>
        <pre id="result"></pre>

        <script>
          const ws = new WebSocket(`ws://${{location.host}}/ws`);
          ws.onmessage = (msg) => {{
            const {{ event }} = JSON.parse(msg.data);
            if (event === 'new-task' || event === 'task-completed') location.reload();
          }};

          async function completeTask(form) {{
            const body = {{ jobKey: form.dataset.key }};
            for (const el of form.elements) {{
              if (el.name && el.value !== '') body[el.name] = el.value;
            }}
            const res = await fetch(`/complete-task/${{form.dataset.type}}`, {{
              method: 'POST',
              headers: {{ 'Content-Type': 'application/json' }},
              body: JSON.stringify(body),
            }});
            document.getElementById('result').textContent = JSON.stringify(await res.json(), null, 2);
          }}

          async function startWorkflow(path) {{
            const productId = document.getElementById('productId');
            const res = await fetch(path, {{
              method: 'POST',
              headers: {{ 'Content-Type': 'application/json' }},
              body: JSON.stringify({{ productId: productId ? productId.value : undefined }}),
            }});
            document.getElementById('result').textContent = JSON.stringify(await res.json(), null, 2);
          }}
        </script>
      </body>
    </html>
    """
