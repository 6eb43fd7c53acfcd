"""Protean Engine runner for the Storefront domain.

With ``PROTEAN_ENV=production`` events are processed asynchronously, so the
OrderSummary projection and order notifications run here rather than inside
the request's unit of work.

Usage:
    python src/server.py
    python src/server.py --debug
"""

import argparse

from protean.server.engine import Engine

from storefront.utils.logging import configure_logging


def main():
    parser = argparse.ArgumentParser(description="Storefront Engine runner")
    parser.add_argument("--debug", action="store_true", help="Log every message the engine handles")
    parser.add_argument("--test-mode", action="store_true", help="Drain pending work and exit")
    args = parser.parse_args()

    configure_logging()

    from storefront.domain import storefront

    storefront.init()
    Engine(storefront, test_mode=args.test_mode, debug=args.debug).run()


if __name__ == "__main__":
    main()
