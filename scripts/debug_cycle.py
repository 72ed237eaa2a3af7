#!/usr/bin/env python
"""Debug cycle: 用冻结时钟模拟若干天的调度时间线。

每一步把时钟拨到下一个触发时间（或重新检查时间）并执行一次周期，
打印每步的结果、选中的端点和配额。默认不发出真实请求。

Usage:
    python scripts/debug_cycle.py [--days N] [--start ISO] [--limit N] [--live]

Examples:
    python scripts/debug_cycle.py --days 2
    python scripts/debug_cycle.py --start 2026-03-02T06:00:00+00:00 --limit 0 --live
"""

import argparse
import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# 确保项目根目录在 sys.path 中
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from returns.result import Success

from chaff.clock import FrozenClock
from chaff.config import Settings
from chaff.endpoints.client import EndpointClient, FetchResponse
from chaff.schedule.coordinator import ExecutionCoordinator
from chaff.schedule.domain.models import TriggerKind
from chaff.schedule.state import SchedulerState


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="模拟调度时间线")
    parser.add_argument("--days", type=int, default=1, help="模拟天数（默认 1）")
    parser.add_argument(
        "--start",
        default=None,
        help="起始时间（ISO 格式，默认今天 00:00 UTC）",
    )
    parser.add_argument("--limit", type=int, default=None, help="覆盖每日上限")
    parser.add_argument("--seed", type=int, default=None, help="随机种子")
    parser.add_argument("--live", action="store_true", help="发出真实请求")
    return parser.parse_args()


class _OfflineClient:
    """不联网的客户端，所有请求返回 200。"""

    async def fetch(self, url, headers=None, timeout=None):
        return Success(FetchResponse(status_code=200, byte_length=1024))

    async def close(self):
        pass


async def simulate(args: argparse.Namespace) -> None:
    overrides = {}
    if args.limit is not None:
        overrides["daily_limit"] = args.limit
    settings = Settings(_env_file=None, **overrides)

    if args.start:
        start = datetime.fromisoformat(args.start)
    else:
        start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=args.days)

    clock = FrozenClock(start, settings.timezone)
    client = EndpointClient(settings.user_agent, settings.request_timeout) if args.live else _OfflineClient()
    coordinator = ExecutionCoordinator(
        SchedulerState.from_settings(settings),
        settings,
        clock,
        client,
        rng=random.Random(args.seed),
    )

    print("=" * 60)
    print(f"模拟区间: {start.isoformat()} -> {end.isoformat()}")
    print(f"每日上限: {settings.daily_limit}  时段: {settings.start_hour}:00 - {settings.end_hour}:00")
    print("=" * 60)

    await coordinator.start()
    try:
        while True:
            schedule = coordinator.state.schedule
            target = schedule.recheck_at or schedule.next_fire_time
            if target is None or target >= end:
                break

            clock.set(target)
            trigger = TriggerKind.RECHECK if schedule.recheck_at else TriggerKind.TIMER
            result = await coordinator.run_cycle(trigger=trigger)

            endpoint = result.endpoint.description if result.endpoint else "-"
            next_time = result.next_fire_time or coordinator.state.schedule.recheck_at
            print(
                f"{clock.now():%a %m-%d %H:%M}  {result.status.value:<20} "
                f"quota={coordinator.state.quota.daily_count}  {endpoint}"
            )
            print(f"{'':>18}next: {next_time:%a %m-%d %H:%M}" if next_time else f"{'':>18}next: -")
    finally:
        await client.close()

    stats = coordinator.stats_snapshot()
    print("=" * 60)
    print(f"总计: {stats.total_count}  成功: {stats.success_count}  失败: {stats.failure_count}")
    print(f"数据量: {stats.formatted_data_usage()}")


if __name__ == "__main__":
    asyncio.run(simulate(parse_args()))
