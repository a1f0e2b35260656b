"""
Invoice Automation ROI Calculator
================================

Command line entry point.

```
python main.py serve                 # start the HTTP API on ROI_HOST:ROI_PORT
python main.py simulate inputs.json  # print the projection for a JSON file
```

``inputs.json`` holds the business inputs accepted by the API, for
example:

```json
{
  "monthly_invoice_volume": 1000,
  "avg_hours_per_invoice": 0.5,
  "hourly_wage": 25,
  "error_rate_manual": 2,
  "error_cost": 50,
  "time_horizon_months": 12,
  "one_time_implementation_cost": 50000
}
```

Configuration is read from the environment (see ``settings.py``).
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from api import create_app
from calculator import calculate_results, json_safe, missing_inputs
from settings import Settings, load_settings

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def serve(settings: Settings, host: str, port: int) -> None:
    app = create_app(settings)
    logger.info("Server running on http://%s:%d", host, port)
    app.run(host=host, port=port)


def simulate(path: str) -> int:
    with open(path) as f:
        inputs = json.load(f)
    missing = missing_inputs(inputs)
    if missing:
        logger.error("Missing required inputs: %s", ", ".join(missing))
        return 1
    print(json.dumps(json_safe(calculate_results(inputs)), indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Invoice automation ROI calculator")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="run the HTTP API")
    serve_parser.add_argument("--host", default=settings.host)
    serve_parser.add_argument("--port", type=int, default=settings.port)

    simulate_parser = subparsers.add_parser("simulate", help="compute results for a JSON inputs file")
    simulate_parser.add_argument("inputs", help="path to a JSON file of business inputs")

    args = parser.parse_args(argv)
    _configure_logging(settings.log_level)

    if args.command == "serve":
        serve(settings, args.host, args.port)
        return 0
    return simulate(args.inputs)


if __name__ == "__main__":
    sys.exit(main())
