"""CLI entry point for inspecting and exercising launch gating state."""

from __future__ import annotations
import argparse
import asyncio
import json
from datetime import timedelta
from typing import Any

from config import settings
from gating.models import KEY_ACKNOWLEDGED, GateMode, PromptPolicy
from gui.app.bootstrap import AppContext, create_app, default_signal_source


def _context(args: argparse.Namespace, **kwargs: Any) -> AppContext:
    policy = PromptPolicy(
        min_launches_before_first_prompt=args.min_launches,
        min_interval_between_attempts=timedelta(hours=args.min_interval_hours),
    )
    source = default_signal_source(
        getattr(args, "signal_url", None), kwargs.get("signal_timeout")
    )
    return create_app(
        namespace=args.namespace,
        data_dir=args.data_dir,
        policy=policy,
        signal_source=source,
        headless=True,
        **kwargs,
    )


def cmd_launch(args: argparse.Namespace) -> None:
    ctx = _context(args, signal_timeout=args.timeout)

    async def _run() -> dict[str, Any]:
        decision = await ctx.root.on_process_start()
        if args.acknowledge and decision.mode is GateMode.REMOTE_SURFACE_PENDING_CONSENT:
            decision = ctx.root.acknowledge_remote_surface()
        outcomes = [ctx.root.on_foregrounded().value for _ in range(args.foregrounds)]
        return {
            "mode": ctx.root.mode.to_dict(),
            "acknowledged": ctx.gate.acknowledged,
            "prompt_outcomes": outcomes,
            "engagement": ctx.scheduler.snapshot(),
            "warnings": [e.message for e in ctx.logging_service.warnings()],
        }

    try:
        result = asyncio.run(_run())
    finally:
        ctx.shutdown()
    print(json.dumps(result, indent=2, ensure_ascii=False))


def cmd_status(args: argparse.Namespace) -> None:
    ctx = _context(args, attach_logging=False)
    result = {
        "namespace": ctx.namespace,
        "acknowledged": ctx.gate.acknowledged,
        "engagement": ctx.scheduler.snapshot(),
        "eligible_now": ctx.scheduler.is_eligible(),
    }
    print(json.dumps(result, indent=2, ensure_ascii=False))


def cmd_reset_ack(args: argparse.Namespace) -> None:
    ctx = _context(args, attach_logging=False)
    was = ctx.gate.acknowledged
    ctx.gate.reset_acknowledgement()
    print(json.dumps({"key": KEY_ACKNOWLEDGED, "was": was, "now": ctx.gate.acknowledged}))


def cmd_rate(args: argparse.Namespace) -> None:
    ctx = _context(args, attach_logging=False)
    outcome = ctx.scheduler.request_from_user()
    print(json.dumps({"outcome": outcome.value, "engagement": ctx.scheduler.snapshot()}, indent=2))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="launchgate")
    p.add_argument("--namespace", default=settings.DEFAULT_NAMESPACE, help="Persistence namespace")
    p.add_argument("--data-dir", default=settings.DATA_DIR, help="Directory holding state files")
    p.add_argument("--min-launches", type=int, default=settings.DEFAULT_MIN_LAUNCHES)
    p.add_argument(
        "--min-interval-hours", type=float, default=float(settings.DEFAULT_MIN_INTERVAL_HOURS)
    )
    sub = p.add_subparsers(dest="command", required=True)

    launch = sub.add_parser("launch", help="Simulate one process start plus foreground signals")
    launch.add_argument("--signal-url", default=None, help="Override LAUNCHGATE_SIGNAL_URL")
    launch.add_argument("--timeout", type=float, default=None, help="Signal timeout in seconds")
    launch.add_argument("--foregrounds", type=int, default=1, help="Foreground signals to send")
    launch.add_argument(
        "--acknowledge", action="store_true", help="Activate the affirmation control if shown"
    )
    launch.set_defaults(func=cmd_launch)

    status = sub.add_parser("status", help="Print persisted gate and prompt state")
    status.set_defaults(func=cmd_status)

    reset = sub.add_parser("reset-ack", help="Clear the persisted acknowledgement flag")
    reset.set_defaults(func=cmd_reset_ack)

    rate = sub.add_parser("rate", help="User-initiated review request (bypasses policy)")
    rate.set_defaults(func=cmd_rate)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
