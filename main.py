#Description: Worker entry point. `run` keeps the TP/SL monitor going; other commands run one operation.

import argparse
import asyncio
import json

from utils.config import settings
from utils.context import build_app_context
from utils.logging import logger

async def run_forever():
    ctx = build_app_context()
    ctx.scheduler.start()
    logger.info(f"Bull signals worker up for {settings.SYMBOL} ({settings.TIMEFRAME}), mode={settings.MODE}")
    try:
        await asyncio.Event().wait()
    finally:
        await ctx.aclose()

async def run_once(command: str, leverage: int | None):
    ctx = build_app_context()
    try:
        if command == "health":
            out = await ctx.api.health()
        elif command == "features":
            out = await ctx.api.features_now()
        elif command == "ask":
            out = await ctx.api.ask(leverage)
        else:
            report = await ctx.monitor.tick()
            out = vars(report)
        print(json.dumps(out, indent=2, default=str))
    finally:
        await ctx.aclose()

def main():
    parser = argparse.ArgumentParser(description="Bull signals worker")
    parser.add_argument("command", nargs="?", default="run", choices=["run", "tick", "health", "features", "ask"])
    parser.add_argument("--leverage", type=int, default=None)
    args = parser.parse_args()
    try:
        if args.command == "run":
            asyncio.run(run_forever())
        else:
            asyncio.run(run_once(args.command, args.leverage))
    except KeyboardInterrupt:
        logger.info("Stopped.")

if __name__ == "__main__":
    main()
