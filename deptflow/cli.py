"""deptflow command line: ESBs, department UIs, workers and process scripts."""

import argparse
import asyncio
import json
import sys

import aiohttp
import uvicorn

from deptflow.config import CONFIG, __version__
from deptflow.domain.catalog import DEPARTMENTS
from deptflow.domain.parsing import now_utc
from deptflow.domain.workflows import WORKFLOWS, promotion_variables, stock_variables


def _log(msg: str):
    print(msg, file=sys.stderr)


# Errors a call to the orchestrator can end with besides an API error.
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


# ── Servers ───────────────────────────────────────────


def cmd_esb1(args):
    from deptflow.adapters.esb.esb1 import app

    uvicorn.run(app, host=args.host, port=CONFIG["esb1_port"], log_level="info")
    return 0


def cmd_esb2(args):
    from deptflow.adapters.esb.esb2 import app

    uvicorn.run(app, host=args.host, port=CONFIG["esb2_port"], log_level="info")
    return 0


def cmd_ui(args):
    from deptflow.adapters.web.department_app import create_department_app

    app = create_department_app(args.department)
    port = CONFIG["ui_ports"][args.department]
    print(f"{DEPARTMENTS[args.department].icon} {DEPARTMENTS[args.department].name} UI on http://localhost:{port}")
    uvicorn.run(app, host=args.host, port=port, log_level="info")
    return 0


# ── Workers ───────────────────────────────────────────


def cmd_worker(args):
    from deptflow.adapters.terminal.worker import TerminalWorker

    worker = TerminalWorker(args.department, simulated=args.simulated)
    try:
        asyncio.run(worker.run())
    except KeyboardInterrupt:
        print(f"\n\n🛑 Shutting down {DEPARTMENTS[args.department].name} worker...")
    return 0


# ── Process scripts ───────────────────────────────────


async def start_process(workflow: str, product_id=None, alert_source=None, client=None):
    from deptflow.adapters.camunda.client import CamundaClient

    client = client or CamundaClient()
    if workflow == "stock":
        variables = stock_variables(now_utc(), product_id=product_id, alert_source=alert_source)
    else:
        variables = promotion_variables(now_utc())
    return await client.create_process_instance(WORKFLOWS[workflow].process_id, variables)


def cmd_start(args):
    from deptflow.adapters.camunda.client import OrchestratorError

    product_id = args.product_id
    alert_source = args.alert_source
    if args.workflow == "stock" and sys.stdin.isatty():
        try:
            if product_id is None:
                product_id = input("   Product ID (e.g., SKU-12345): ").strip()
            if alert_source is None:
                alert_source = input("   Alert source (manual/automatic/low-stock-alert): ").strip()
        except EOFError:
            _log("❌ Failed to start process: no input")
            return 1

    print(f"🚀 Starting {WORKFLOWS[args.workflow].label} workflow...")
    try:
        instance = asyncio.run(start_process(args.workflow, product_id, alert_source))
    except (OrchestratorError, *TRANSPORT_ERRORS) as e:
        _log(f"❌ Failed to start process: {str(e) or type(e).__name__}")
        return 1
    print("✅ Process instance started!")
    print(f"   Process Instance Key: {instance.process_instance_key}")
    print(f"   BPMN Process ID: {instance.bpmn_process_id}")
    print(f"   Version: {instance.version}")
    return 0


def cmd_deploy(args):
    from deptflow.adapters.camunda.client import CamundaClient, OrchestratorError

    print(f"📦 Deploying {args.bpmn}...")
    try:
        deployments = asyncio.run(CamundaClient().deploy_resource(args.bpmn))
    except FileNotFoundError as e:
        _log(f"❌ {e}")
        return 1
    except (OrchestratorError, *TRANSPORT_ERRORS) as e:
        _log(f"❌ Deployment failed: {str(e) or type(e).__name__}")
        return 1
    for d in deployments:
        print(f"✅ Deployed {d.bpmn_process_id} v{d.version} (key {d.process_definition_key})")
    return 0


def cmd_health(args):
    from deptflow.adapters.esb.client import EsbClient

    async def check():
        client = EsbClient()
        return {esb: await client.check_health(esb) for esb in ("esb1", "esb2")}

    results = asyncio.run(check())
    print(json.dumps(results, indent=2))
    return 0 if all(r.get("status") == "healthy" for r in results.values()) else 1


def build_parser():
    p = argparse.ArgumentParser(prog="deptflow", description="Retail department workflows on Camunda 8")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd")
    departments = sorted(DEPARTMENTS)

    s = sub.add_parser("esb1", help="Run ESB1 (Data Analysis & Finance)")
    s.add_argument("--host", default="0.0.0.0")
    s.set_defaults(func=cmd_esb1)

    s = sub.add_parser("esb2", help="Run ESB2 (Commercial, Marketing, IT, Logistics, Merchandising)")
    s.add_argument("--host", default="0.0.0.0")
    s.set_defaults(func=cmd_esb2)

    s = sub.add_parser("ui", help="Run a department web UI")
    s.add_argument("department", choices=departments)
    s.add_argument("--host", default="0.0.0.0")
    s.set_defaults(func=cmd_ui)

    s = sub.add_parser("worker", help="Run a department terminal worker")
    s.add_argument("department", choices=departments)
    s.add_argument("--simulated", action="store_true", help="Answer every prompt with its default")
    s.set_defaults(func=cmd_worker)

    s = sub.add_parser("start", help="Start a process instance")
    s.add_argument("workflow", choices=sorted(WORKFLOWS))
    s.add_argument("--product-id", help="Stock workflow: product id")
    s.add_argument("--alert-source", help="Stock workflow: alert source")
    s.set_defaults(func=cmd_start)

    s = sub.add_parser("deploy", help="Deploy a BPMN file")
    s.add_argument("bpmn", help="Path to the .bpmn file")
    s.set_defaults(func=cmd_deploy)

    s = sub.add_parser("health", help="Check both ESBs")
    s.set_defaults(func=cmd_health)
    return p


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    if not hasattr(args, "func"):
        p.print_help()
        return 2
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
