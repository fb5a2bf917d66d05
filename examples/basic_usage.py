#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Basic expiring cache examples using the drivecache Python API.

This script demonstrates:
1. Setting, reading and expiring entries
2. Listening for removed entries
3. Two caches sharing one backing store
"""

import asyncio
from datetime import datetime, timedelta

from drivecache import ExpireCache, MemoryStorageDriver, MemoryStore


async def single_cache():
    """Store a few values and watch one of them expire."""
    print("=== Single Cache ===")

    cache = ExpireCache("sessions", MemoryStorageDriver(), default_ttl=300)
    cache.on_clear(lambda removed: print(f"Removed: {removed}"))

    await cache.set("user:1", {"name": "Ada"})
    await cache.set(
        "token", "abc123", expires=datetime.now() + timedelta(milliseconds=200)
    )

    print(f"Entries: {await cache.size()}")
    print(f"Token expires at: {await cache.expires('token')}")

    await asyncio.sleep(0.3)
    print(f"Token after expiry: {await cache.get('token')}")

    async for key, value in cache.entries():
        print(f"  {key} = {value}")

    await cache.close()


async def shared_store():
    """Two caches persisting to the same store pick up each other's writes."""
    print("\n=== Shared Store ===")

    store = MemoryStore()
    async with ExpireCache("left", MemoryStorageDriver("left", store=store)) as left:
        async with ExpireCache(
            "right", MemoryStorageDriver("right", store=store)
        ) as right:
            await left.set("greeting", "hello")
            await store.drain()

            print(f"Right sees greeting: {await right.get('greeting')}")


async def main():
    """Run all examples."""
    try:
        await single_cache()
        await shared_store()

        print("\n=== Examples Complete ===")

    except Exception as e:
        print(f"Error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
