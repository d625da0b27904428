"""Tests for the interactive and simulated terminal workers."""

import asyncio
import random

import pytest

from deptflow.adapters.camunda.worker import ActiveJob
from deptflow.adapters.terminal.prompt import banner, decision_box, format_value, task_box
from deptflow.adapters.terminal.worker import INTERACTIVE_ACTOR, SIMULATED_ACTOR, TerminalWorker
from deptflow.domain.catalog import TASKS, UnknownDepartmentError


def _scripted(answers, asked=None):
    answers = list(answers)

    async def answer(question):
        if asked is not None:
            asked.append(question)
        await asyncio.sleep(0)
        return answers.pop(0)

    return answer


class TestInteractive:
    @pytest.mark.asyncio
    async def test_completes_with_answers(self, orchestrator, job_factory, capsys):
        worker = TerminalWorker("finance", client=orchestrator, answer=_scripted(["22", "+9%", "low", "yes"]))
        job = ActiveJob(job_factory(key="51", variables={"discountPercentage": 30}), orchestrator)

        await worker.handle(job)

        key, result = orchestrator.completed[0]
        assert key == "51"
        assert result["approved"] is True
        assert result["marginAfterPromo"] == 22
        assert result["revenueImpact"] == "+9%"
        assert result["approvedBy"] == INTERACTIVE_ACTOR
        out = capsys.readouterr().out
        assert "DECISION: Should we approve this promotion?" in out
        assert "APPROVED" in out

    @pytest.mark.asyncio
    async def test_gated_question_is_skipped(self, orchestrator, job_factory):
        asked = []
        worker = TerminalWorker("it", client=orchestrator, answer=_scripted(["no", "yes", "yes", "no"], asked))
        job = ActiveJob(job_factory(key="52", task_type="update-system-prices"), orchestrator)

        await worker.handle(job)

        assert len(asked) == 4
        assert not any(q.startswith("Number of POS terminals") for q in asked)
        result = orchestrator.completed[0][1]
        assert result["systemsUpdated"]["pos"]["terminalsAffected"] == 0
        assert result["systemsUpdated"]["inventory"]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_rejection(self, orchestrator, job_factory, capsys):
        worker = TerminalWorker("logistics", client=orchestrator, answer=_scripted(["100", "40", "3", "no"]))
        job = ActiveJob(job_factory(key="53", task_type="check-delivery"), orchestrator)

        await worker.handle(job)

        result = orchestrator.completed[0][1]
        assert result["deliveryConforming"] is False
        assert result["quantityAccepted"] == 60
        assert "REJECTED" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_prompts_do_not_interleave(self, orchestrator, job_factory):
        asked = []
        answers = ["P1", "expiring", "high", "P2", "seasonal", "low"]
        worker = TerminalWorker("data-analysis", client=orchestrator, answer=_scripted(answers, asked))
        jobs = [
            ActiveJob(job_factory(key=k, task_type="identify-products"), orchestrator) for k in ("61", "62")
        ]

        await asyncio.gather(*(worker.handle(j) for j in jobs))

        prompts = [f.prompt for f in TASKS["identify-products"].fields]
        assert asked == prompts + prompts
        results = {key: result for key, result in orchestrator.completed}
        assert results["61"]["targetProducts"] == ["P1"]
        assert results["62"]["targetProducts"] == ["P2"]

    @pytest.mark.asyncio
    async def test_second_job_waits_for_first_prompts(self, orchestrator, job_factory):
        events = []
        answers = iter(["P1", "expiring", "high", "P2", "seasonal", "low"])

        async def answer(question):
            events.append(("ask", question))
            for _ in range(3):
                await asyncio.sleep(0)
            return next(answers)

        worker = TerminalWorker("data-analysis", client=orchestrator, answer=answer)

        async def handle(key):
            job = ActiveJob(job_factory(key=key, task_type="identify-products"), orchestrator)
            events.append(("start", key))
            await worker.handle(job)

        await asyncio.gather(handle("63"), handle("64"))

        prompts = [f.prompt for f in TASKS["identify-products"].fields]
        asks = [i for i, e in enumerate(events) if e[0] == "ask"]
        # job 64 is already waiting while job 63 is still being prompted
        assert events.index(("start", "64")) < asks[1]
        assert [events[i][1] for i in asks] == prompts + prompts
        results = {key: result for key, result in orchestrator.completed}
        assert results["63"]["targetProducts"] == ["P1"]
        assert results["63"]["productDetails"][0]["reason"] == "expiring"
        assert results["64"]["targetProducts"] == ["P2"]
        assert results["64"]["urgency"] == "low"


class TestSimulated:
    @pytest.mark.asyncio
    async def test_uses_defaults(self, orchestrator, job_factory):
        worker = TerminalWorker(
            "merchandising", client=orchestrator, simulated=True, delay_seconds=0, approve=True,
            rng=random.Random(0),
        )
        job = ActiveJob(job_factory(key="71", task_type="verify-stock", variables={"currentStock": 20}), orchestrator)

        await worker.handle(job)

        result = orchestrator.completed[0][1]
        assert result["stockVerified"] is True
        assert result["physicalStockCount"] == 18
        assert result["discrepancy"] == 2

    @pytest.mark.asyncio
    async def test_approve_false_rejects(self, orchestrator, job_factory):
        worker = TerminalWorker("finance", client=orchestrator, simulated=True, delay_seconds=0, approve=False)
        job = ActiveJob(job_factory(key="72", task_type="analyze-replenishment"), orchestrator)

        await worker.handle(job)

        result = orchestrator.completed[0][1]
        assert result["financeApproved"] is False
        assert result["approvedBy"] is None

    def test_actor_and_header(self, orchestrator):
        worker = TerminalWorker("logistics", client=orchestrator, simulated=True)
        assert worker.actor == SIMULATED_ACTOR
        header = worker.header()
        assert "LOGISTICS & PROCUREMENT - Simulated Worker" in header
        assert "process-replenishment, check-delivery, handle-return" in header

    def test_one_job_worker_per_task_type(self, orchestrator):
        worker = TerminalWorker("merchandising", client=orchestrator)
        assert [w.task_type for w in worker.group.workers] == ["create-replenishment-request", "verify-stock"]

    def test_stop(self, orchestrator):
        worker = TerminalWorker("it", client=orchestrator)
        worker.stop()
        assert all(not w.running for w in worker.group.workers)

    def test_unknown_department(self, orchestrator):
        with pytest.raises(UnknownDepartmentError):
            TerminalWorker("legal", client=orchestrator)


class TestPrompt:
    def test_task_box_details(self):
        box = task_box("Verify Stock Level", "99", [("Product", None), ("Products", ["P1"])])
        assert "NEW TASK: Verify Stock Level" in box
        assert "Job Key: 99" in box
        assert "• Product: N/A" in box
        assert '• Products: ["P1"]' in box

    def test_banner_width(self):
        lines = banner("TITLE", ["line"]).splitlines()
        assert len({len(line) for line in lines}) == 1

    def test_decision_box(self):
        assert "DECISION: Approve?" in decision_box("Approve?")

    def test_format_value(self):
        assert format_value("") == "N/A"
        assert format_value(0) == "0"
        assert format_value({"a": 1}) == '{"a": 1}'
