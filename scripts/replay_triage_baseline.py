#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import os
import sys
import tempfile
from pathlib import Path


def _assert_step(
    case_name: str,
    step_idx: int,
    body: dict[str, object],
    expect: dict[str, object],
) -> None:
    category = expect.get("category")
    if isinstance(category, str):
        assert body.get("category") == category, (
            f"[{case_name}#{step_idx}] category mismatch: "
            f"expected={category}, got={body.get('category')}"
        )
    assert body.get("source") == "fallback", (
        f"[{case_name}#{step_idx}] expected fallback reply, got source={body.get('source')}"
    )
    contains = expect.get("reply_contains")
    if isinstance(contains, list):
        reply = str(body.get("reply") or "")
        for item in contains:
            if isinstance(item, str):
                assert item in reply, f"[{case_name}#{step_idx}] reply missing token: {item}"


def main() -> int:
    root_dir = Path(__file__).resolve().parents[1]
    if str(root_dir) not in sys.path:
        sys.path.insert(0, str(root_dir))

    from fastapi.testclient import TestClient

    from app.container import build_container
    from app.main import app

    parser = argparse.ArgumentParser(description="Replay frozen triage baseline cases.")
    parser.add_argument(
        "--cases",
        default="./baseline/triage_regression_cases.json",
        help="Path to baseline cases JSON.",
    )
    args = parser.parse_args()

    cases_path = Path(args.cases)
    payload = json.loads(cases_path.read_text(encoding="utf-8"))
    cases = payload.get("cases", [])
    if not isinstance(cases, list) or not cases:
        raise ValueError("baseline cases is empty")

    with tempfile.TemporaryDirectory(prefix="tranquil_baseline_") as tmp_dir:
        os.environ["TRANQUIL_CHAT_HISTORY_FILE"] = str(Path(tmp_dir) / "chat_history.json")
        os.environ["TRANQUIL_AI_ENABLED"] = "0"
        app.state.container = build_container()
        client = TestClient(app)

        total_steps = 0
        for case in cases:
            if not isinstance(case, dict):
                continue
            case_name = str(case.get("name") or "unnamed")
            steps = case.get("steps")
            if not isinstance(steps, list):
                continue
            for idx, step in enumerate(steps, start=1):
                if not isinstance(step, dict):
                    continue
                message = str(step.get("message") or "")
                request_body: dict[str, str] = {"message": message}
                if step.get("user_id"):
                    request_body["user_id"] = str(step["user_id"])
                expect = step.get("expect") or {}
                response = client.post("/api/v1/chat", json=request_body)
                assert response.status_code == 200, (
                    f"[{case_name}#{idx}] status={response.status_code}"
                )
                _assert_step(
                    case_name,
                    idx,
                    response.json(),
                    expect if isinstance(expect, dict) else {},
                )
                total_steps += 1

    print(f"triage baseline replay passed: {len(cases)} cases, {total_steps} steps")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
