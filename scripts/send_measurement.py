#!/usr/bin/env python3
"""
Sensor simulator: sends measurement datagrams to a running bridge.

Usage examples
    # one reading from S1:
    python scripts/send_measurement.py --id S1 --temperature 21.5

    # random readings every 5 seconds:
    python scripts/send_measurement.py --id S2 --interval 5
"""
import argparse
import random
import socket
import sys
import time
import uuid
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.models.measurement import Measurement, MeasurementData


def build_measurement(args: argparse.Namespace) -> Measurement:
    return Measurement(
        sensor_id=args.id,
        sensor_time=int(time.time()),
        measurement_id=str(uuid.uuid4()),
        measurement_data=MeasurementData(
            temperature=args.temperature if args.temperature is not None else round(random.uniform(18, 25), 1),
            humidity=args.humidity if args.humidity is not None else round(random.uniform(35, 60), 1),
            pressure=args.pressure if args.pressure is not None else round(random.uniform(990, 1030), 1),
        ),
    )


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--id", required=True, help="sensor id (must match a configured serial)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3232)
    parser.add_argument("--temperature", type=float)
    parser.add_argument("--humidity", type=float)
    parser.add_argument("--pressure", type=float)
    parser.add_argument("--interval", type=float, help="repeat every N seconds")
    args = parser.parse_args()

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        while True:
            measurement = build_measurement(args)
            sock.sendto(measurement.encode(), (args.host, args.port))
            print(f"→ {args.host}:{args.port} {measurement.sensor_id} "
                  f"T={measurement.temperature} H={measurement.humidity} P={measurement.pressure}")
            if not args.interval:
                break
            time.sleep(args.interval)
    except KeyboardInterrupt:
        print("\nStopped by user.")
    finally:
        sock.close()


if __name__ == "__main__":
    main()
