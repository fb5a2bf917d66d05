# SPDX-License-Identifier: MIT
"""Integration tests for drivecache.

These tests wire several caches and drivers together over a shared backing
store and check end-to-end behaviour (persistence across instances, peers
converging through update notifications, configuration driven setup).
"""
