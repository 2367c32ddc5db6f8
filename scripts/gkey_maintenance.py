#!/usr/bin/env python3
"""
G-Key 维护脚本
提供类别规范化、补齐缺失 Key、清理过期冷却、强制解锁等功能
"""

import asyncio
import argparse
import sys
from pathlib import Path

# 添加项目根目录到Python路径
sys.path.append(str(Path(__file__).parent.parent))

from core.config_manager import ConfigManager
from microservices.gkey_service.factory import GKeyServiceFactory, SERVICE_NAME
from microservices.gkey_service.protocols import GKeyServiceError


async def normalize_categories(factory: GKeyServiceFactory):
    """把已存储的类别统一为小写"""
    updated = await factory.service.normalize_stored_categories()
    print(f"Normalized {updated} G-Key categories")
    return updated


async def backfill_keys(factory: GKeyServiceFactory, user_ids):
    """为用户补齐缺失类别的 Key"""
    total = 0
    for user_id in user_ids:
        keys = await factory.service.get_user_keys(user_id)
        print(f"{user_id}: {len(keys)} keys")
        total += len(keys)
    return total


async def expire_cooloffs(factory: GKeyServiceFactory):
    """把冷却已结束的 Key 恢复为可用"""
    updated = await factory.service.expire_cooloffs()
    print(f"Expired {updated} cooloffs")
    return updated


async def force_unlock(factory: GKeyServiceFactory, user_id: str, category: str):
    """强制解锁单个 Key"""
    key = await factory.service.force_unlock(user_id, category)
    print(f"Unlocked {key.category} for {key.user_id} (status={key.status.value})")
    return key


async def main():
    """主函数"""
    parser = argparse.ArgumentParser(description="G-Key 维护工具")
    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    subparsers.add_parser("normalize-categories", help="规范化类别大小写")

    backfill_parser = subparsers.add_parser("backfill", help="补齐用户缺失的 Key")
    backfill_parser.add_argument("user_ids", nargs="+", help="用户ID")

    subparsers.add_parser("expire-cooloffs", help="清理过期冷却")

    unlock_parser = subparsers.add_parser("force-unlock", help="强制解锁")
    unlock_parser.add_argument("user_id", help="用户ID")
    unlock_parser.add_argument("category", help="类别")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    config_manager = ConfigManager(SERVICE_NAME)
    # 一次性任务不启动后台清理
    config_manager.settings.services.gkey_sweeper_enabled = False
    factory = GKeyServiceFactory(config_manager)
    await factory.initialize()

    try:
        if args.command == "normalize-categories":
            await normalize_categories(factory)
        elif args.command == "backfill":
            await backfill_keys(factory, args.user_ids)
        elif args.command == "expire-cooloffs":
            await expire_cooloffs(factory)
        elif args.command == "force-unlock":
            await force_unlock(factory, args.user_id, args.category)
    except GKeyServiceError as e:
        print(f"Error: {e}")
        return 1
    finally:
        await factory.close()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
