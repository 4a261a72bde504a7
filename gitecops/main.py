#!/usr/bin/env python3
"""
gitecops - Main Entry Point
Sends syslog messages to a collector, normalizes device names and prints
the local device inventory.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import FRAMING_METHODS, resolve_config
from .device import DeviceName
from .errors import GitecOpsError, ValidationError
from .inventory import DeviceInventory
from .syslog_sender import SyslogSender

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='gitecops', description='Device operations toolkit')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    send = sub.add_parser('send', help='Send one syslog message')
    send.add_argument('message')
    send.add_argument('--target', help='Collector host (env: HPSINK_TARGET)')
    send.add_argument('--port', type=int, help='Collector port (env: HPSINK_PORT, default 514)')
    send.add_argument('--tcp', action='store_true', default=None, help='Use TCP instead of UDP (env: HPSINK_TCP)')
    send.add_argument('--framing', choices=FRAMING_METHODS, help='TCP framing (env: HPSINK_FRAMING)')
    send.add_argument('--max-len', type=int, help='Maximum bytes on the wire (env: HPSINK_MAXLEN, default 2048)')
    send.add_argument('--severity', default='informational')
    send.add_argument('--facility', default='user')
    send.add_argument('--client-name', help='Host name in the message (env: HPSINK_CLIENTNAME)')
    send.add_argument('--passthru', action='store_true',
                      help='Report send failures without failing and echo the message')

    normalize = sub.add_parser('normalize', help='Normalize device names')
    normalize.add_argument('names', nargs='+')

    inventory = sub.add_parser('inventory', help='Print the local device inventory as JSON')
    inventory.add_argument('--name', help='Device name to use instead of the host name')

    return parser


def _cmd_send(args: argparse.Namespace) -> int:
    config = resolve_config(
        target=args.target,
        port=args.port,
        use_tcp=args.tcp,
        framing=args.framing,
        max_len=args.max_len,
        client_name=args.client_name
    )
    logger.info(f"Sending to {config.transport.upper()} {config.target}:{config.port}")

    result = SyslogSender(config).send(
        args.message,
        severity=args.severity,
        facility=args.facility,
        passthru=args.passthru
    )
    if result is not None:
        print(result)
    return 0


def _cmd_normalize(args: argparse.Namespace) -> int:
    status = 0
    for raw in args.names:
        try:
            name = DeviceName.parse(raw)
        except ValidationError as e:
            logger.error(str(e))
            status = 1
            continue
        print(f"{raw} -> {name.normalized}")
    return status


def _cmd_inventory(args: argparse.Namespace) -> int:
    device = DeviceInventory().collect(name=args.name)
    print(json.dumps(device.to_dict(), indent=2))
    return 0


COMMANDS = {
    'send': _cmd_send,
    'normalize': _cmd_normalize,
    'inventory': _cmd_inventory,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = _build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger('gitecops').setLevel(logging.DEBUG)

    try:
        return COMMANDS[args.command](args)
    except GitecOpsError as e:
        logger.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
