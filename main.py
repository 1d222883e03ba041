"""Shelly adapter runner. Drives one device from the command line.

    python main.py test                  # identify the device
    python main.py discover              # first run: groups + command catalog
    python main.py poll [--once]         # poll every POLL_INTERVAL_SECONDS
    python main.py send relay/0?turn=on  # send one action token

The host comes from --host or SHELLY_HOST in .env.
"""

import argparse
import logging
import sys
import time

import requests
from dotenv import load_dotenv

load_dotenv()

import config
from commands import describe_command
from messages import Messages
from resilience import retry_with_fallback
from shelly import Shelly
from state import ProviderData, Setting

log = logging.getLogger(__name__)


def build_setting(args):
    return Setting(
        host=args.host or config.SHELLY_HOST,
        port=args.port or config.SHELLY_PORT,
        user=config.SHELLY_USER,
        password=config.SHELLY_PASSWORD,
    )


def cmd_test(shelly, messages, args):
    print(shelly.test_connection(shelly.provider_data.setting))


def cmd_discover(shelly, messages, args):
    shelly.first_run()
    print(f"Generation {shelly.generation}")
    print()
    print(f"{'Group':<20} {'Fields':>6}  Cache")
    print("-" * 40)
    for group in shelly.supported_properties():
        cache = f"{group.cache_seconds}s" if group.cache_seconds else "-"
        print(f"{group.name:<20} {len(group.fields):>6}  {cache}")
    print()
    for command in shelly.available_commands:
        label, options = describe_command(command, messages)
        print(label)
        for value, text in options:
            print(f"  {text:<20} {value}")
    for table in shelly.provider_data.tables or []:
        print()
        print(f"Table {table.name}: " + ", ".join(c.name for c in table.columns))


def cmd_poll(shelly, messages, args):
    shelly.first_run()
    log.info("Entering poll loop (interval: %ds)", config.POLL_INTERVAL_SECONDS)
    while True:
        cycle_start = time.time()
        variables, fallback = retry_with_fallback(shelly.poll, None, "shelly")
        if variables is not None:
            log.info("Poll complete: %d variable(s)%s", len(variables),
                     " (last known good)" if fallback else "")
            if args.once:
                for name in sorted(variables):
                    print(f"{name} = {variables[name]}")
        if args.once:
            return

        elapsed = time.time() - cycle_start
        sleep_time = max(0, config.POLL_INTERVAL_SECONDS - elapsed)
        if sleep_time > 0:
            time.sleep(sleep_time)


def cmd_send(shelly, messages, args):
    shelly.first_run()
    shelly.send_command(args.action)


def build_parser():
    parser = argparse.ArgumentParser(description="Shelly Gen1/Gen2 device adapter")
    parser.add_argument("--host", help="device IP or hostname (default: SHELLY_HOST)")
    parser.add_argument("--port", type=int, help="device HTTP port (default: 80)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("test", help="identify the device").set_defaults(func=cmd_test)
    sub.add_parser("discover", help="discover groups and commands").set_defaults(func=cmd_discover)

    poll = sub.add_parser("poll", help="poll the device periodically")
    poll.add_argument("--once", action="store_true", help="poll one cycle and print variables")
    poll.set_defaults(func=cmd_poll)

    send = sub.add_parser("send", help="send one action token")
    send.add_argument("action", help="e.g. relay/0?turn=on or Switch.Toggle?id=0")
    send.set_defaults(func=cmd_send)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    messages = Messages()
    shelly = Shelly(ProviderData(setting=build_setting(args)), messages=messages)
    try:
        args.func(shelly, messages, args)
    except requests.RequestException as e:
        log.error("Shelly at %s unreachable: %s", shelly.provider_data.setting.host, e)
        return 1
    except KeyboardInterrupt:
        log.info("Shutting down")
        shelly.cancel()
    return 0


if __name__ == "__main__":
    sys.exit(main())
