#!/usr/bin/env python3
"""Script to verify the configured directions provider and loop waypoints."""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from simulator.config import settings
from simulator.services.directions import GeometryUnavailableError, get_provider
from simulator.services.directions.osrm_client import check_health
from simulator.services.simulation.loop import build_loop


def main():
    print("=" * 60)
    print("Directions Provider Check")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    print(f"   [OK] Provider: {settings.directions_provider}")
    if settings.directions_provider == "osrm":
        print(f"   [OK] OSRM Base URL: {settings.osrm_base_url}")
        print(f"   [OK] OSRM Profile: {settings.osrm_profile}")
    elif not settings.google_api_key:
        print("   [ERROR] SIM_GOOGLE_API_KEY is not configured")
        return 1
    print(f"   [OK] movement_delta={settings.movement_delta} arrival_epsilon={settings.arrival_epsilon}")
    print()

    if settings.directions_provider == "osrm":
        print("2. Testing OSRM health check...")
        if not check_health():
            print("   [ERROR] OSRM service is not responding")
            return 1
        print("   [OK] OSRM service is healthy and accessible!")
        print()

    print("3. Building loop...")
    if len(settings.loop_waypoints) < 2:
        print("   [ERROR] SIM_LOOP_WAYPOINTS must list at least two waypoints")
        return 1
    try:
        loop = build_loop(settings.loop_waypoints, get_provider(settings.directions_provider))
    except (GeometryUnavailableError, ValueError) as e:
        print(f"   [ERROR] Failed to build loop: {e}")
        return 1
    print(f"   [OK] Loop of {len(loop)} points starting at {loop[0].as_query()}")
    print()

    print("=" * 60)
    print("[SUCCESS] Directions provider is working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
