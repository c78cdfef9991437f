"""
Command-line interface for EdgeGrid Python SDK
Signs and sends a single API request, curl style
"""

import argparse
import contextlib
import io
import logging
import sys
from typing import Dict, List, Optional

import requests

from .version import __version__
from .exceptions import EdgeGridSDKError
from .http_clients import RequestsTransport
from .signing import (
    AUTHORIZATION_HEADER,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_MAX_BODY_HASH_SIZE,
    ClientCredential,
    EdgeGridV1Signer,
    SignableRequest,
    create_signing_config,
)

logger = logging.getLogger(__name__)

EPILOG = """
examples:
  edgegrid-openapi -c CLIENT_TOKEN -a ACCESS_TOKEN -s SECRET \\
      https://akab-1234.luna.akamaiapis.net/diagnostic-tools/v1/locations
  edgegrid-openapi -c CT -a AT -s SECRET -d '{"key": "value"}' https://host/api/resource
"""


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='edgegrid-openapi',
        description='Sign an API request with EdgeGrid V1 credentials and send it',
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'EdgeGrid Python SDK {__version__}'
    )

    parser.add_argument('-c', '--client-token', help='Client token')
    parser.add_argument('-a', '--access-token', help='Access token')
    parser.add_argument('-s', '--secret', help='Client secret')

    body_group = parser.add_mutually_exclusive_group()
    body_group.add_argument(
        '-d', '--data',
        help='String of data to send to the API (defaults the method to POST)'
    )
    body_group.add_argument(
        '-f', '--file',
        dest='upload_file',
        help='Local file to upload (defaults the method to PUT)'
    )

    parser.add_argument('-o', '--output', help='Local file to save the API response to')
    parser.add_argument(
        '-m', '--max-size',
        type=int,
        default=DEFAULT_MAX_BODY_HASH_SIZE,
        help=f'Maximum amount of data to use in the signing hash (default: {DEFAULT_MAX_BODY_HASH_SIZE})'
    )
    parser.add_argument('-X', '--request', dest='method', help='Force the HTTP method (PUT, POST, DELETE, ...)')
    parser.add_argument(
        '-H', '--header',
        dest='headers',
        action='append',
        default=[],
        help="HTTP header line 'Name: value' (repeatable)"
    )
    parser.add_argument(
        '--sign-header',
        dest='sign_headers',
        action='append',
        default=[],
        help='Header name to include in the signature (repeatable, in order)'
    )
    parser.add_argument(
        '-T', '--content-type',
        default=DEFAULT_CONTENT_TYPE,
        help=f'Content type of the request body (default: {DEFAULT_CONTENT_TYPE})'
    )
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Print request details')
    parser.add_argument('url', nargs='?', help='Fully qualified API URL')

    return parser


def parse_header_lines(lines: List[str]) -> Dict[str, object]:
    """
    Parse 'Name: value' header lines.

    Lines without a colon are ignored. Repeated names collect their values
    in a list.
    """
    headers: Dict[str, object] = {}
    for line in lines:
        name, sep, value = line.partition(':')
        name = name.strip()
        if not sep or not name:
            logger.warning(f"Ignoring malformed header line: {line!r}")
            continue
        value = value.strip()
        if name in headers:
            existing = headers[name]
            headers[name] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            headers[name] = value
    return headers


def resolve_method(args) -> str:
    """Pick the HTTP method: -X wins, then -d implies POST and -f implies PUT."""
    if args.method:
        return args.method.upper()
    if args.data is not None:
        return 'POST'
    if args.upload_file is not None:
        return 'PUT'
    return 'GET'


def print_request_details(args, method: str, err) -> None:
    print(f"{method} {args.url}", file=err)
    print(f"ClientToken: {args.client_token}", file=err)
    print(f"AccessToken: {args.access_token}", file=err)
    print("Secret: ***", file=err)
    if args.data is not None:
        print(f"Data: [{args.data}]", file=err)
    if args.upload_file is not None:
        print(f"UploadFile: {args.upload_file}", file=err)
    if args.output is not None:
        print(f"OutputFile: {args.output}", file=err)
    for header in args.headers:
        print(header, file=err)
    print(f"Content-Type: {args.content_type}", file=err)


def execute(args, parser: argparse.ArgumentParser, transport=None, out=None, err=None) -> int:
    """
    Sign and send the request described by parsed arguments.

    Args:
        args: Parsed arguments
        parser: Parser used to print usage on missing arguments
        transport: Transport to send through (a RequestsTransport when omitted)
        out: Binary stream for the response body when no output file is given
        err: Text stream for diagnostics

    Returns:
        int: Exit code
    """
    err = err or sys.stderr

    if not (args.url and args.client_token and args.access_token and args.secret):
        parser.print_usage(err)
        print("error: url, client token, access token and secret are required", file=err)
        return 1

    method = resolve_method(args)
    if args.verbose:
        print_request_details(args, method, err)

    signer = EdgeGridV1Signer(create_signing_config(args.sign_headers, args.max_size))
    credential = ClientCredential(args.client_token, args.access_token, args.secret)

    with contextlib.ExitStack() as stack:
        body = None
        if args.upload_file is not None:
            body = stack.enter_context(open(args.upload_file, 'rb'))
        elif args.data is not None:
            body = io.BytesIO(args.data.encode('utf-8'))

        request = SignableRequest(
            method=method,
            url=args.url,
            headers=parse_header_lines(args.headers),
            content=body,
            content_type=args.content_type if body is not None else None
        )
        signer.sign(request, credential, body)

        if args.verbose:
            print(f"{AUTHORIZATION_HEADER}: {request.headers[AUTHORIZATION_HEADER]}", file=err)
            print(file=err)

        if transport is None:
            transport = stack.enter_context(RequestsTransport())
        response = transport.send(request)

    if args.output:
        with open(args.output, 'wb') as fh:
            fh.write(response.content)
    else:
        out = out or sys.stdout.buffer
        out.write(response.content)
        out.flush()

    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        return execute(args, parser)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except requests.RequestException as e:
        print(f"Request failed: {e}", file=sys.stderr)
        return 1
    except (EdgeGridSDKError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
