"""The curl commands: run any REST call against the cluster."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Any, Optional, TextIO

CURL_COMMAND_NAME = "curl"
ACTIONS = ("delete", "get", "post", "put")

_QUERY_HELP = (
    "URL query parameters (key & value) for the REST API. Use '&' to separate multiple "
    "parameters. Ex: -q \"v=true&s=order:desc,index_patterns\""
)
_DATA_HELP = (
    "Data for the REST API. If value starts with '@', the rest should be a file name "
    "to read the data from."
)
_HEADERS_HELP = (
    "Headers for the REST API. Consists of case-insensitive name followed by a colon (`:`), "
    "then by its value. Use ';' to separate multiple parameters. "
    "Ex: -H \"content-type:json;accept-encoding:gzip\""
)

_EXAMPLES = {
    "delete": (
        "# Delete a document from an index.\n"
        "searchctl curl delete --path \"my-index/_doc/1\" --query-params \"routing=node1\"\n"
    ),
    "get": (
        "# get document count for an index\n"
        "searchctl curl get --path \"_cat/count/my-index-01\" --query-params \"v=true\" --pretty\n\n"
        "# get health status of a cluster.\n"
        "searchctl curl get --path \"_cluster/health\" --pretty --filter-path \"status\"\n"
    ),
    "post": (
        "# insert a document to an index\n"
        "searchctl curl post --path \"my-index-01/_doc\" "
        "--data '{\"message\": \"insert document\"}'\n"
    ),
    "put": (
        "# Create a knn index from mapping setting saved in file \"knn-mapping.json\"\n"
        "searchctl curl put --path \"my-knn-index\" --data \"@some-location/knn-mapping.json\" "
        "--pretty\n"
    ),
}


@dataclass
class CurlRequest:
    """One REST call as given on the command line."""

    action: str
    path: str
    query_params: str = ""
    data: str = ""
    headers: str = ""
    pretty: bool = False
    output_format: str = ""
    output_filter_path: str = ""


class RequestError(Exception):
    """The cluster answered with an error; ``response`` holds its body."""

    def __init__(self, response: Any) -> None:
        if isinstance(response, (bytes, bytearray)):
            response = bytes(response).decode("utf-8", errors="replace")
        super().__init__(response)
        self.response: str = response


def build_curl_request(action: str, args: argparse.Namespace) -> CurlRequest:
    """Collect the curl flags from parsed arguments into a request."""
    return CurlRequest(
        action=action,
        path=args.path,
        query_params=getattr(args, "query_params", "") or "",
        data=getattr(args, "data", "") or "",
        headers=getattr(args, "headers", "") or "",
        pretty=bool(getattr(args, "pretty", False)),
        output_format=getattr(args, "output_format", "") or "",
        output_filter_path=getattr(args, "filter_path", "") or "",
    )


def curl_execute(handler: Any, request: CurlRequest, out: Optional[TextIO] = None) -> None:
    """Run the request and print the response; an error response is printed too."""
    out = out if out is not None else sys.stdout
    try:
        response = handler.curl(request)
    except RequestError as exc:
        print(exc.response, file=out)
        return
    if isinstance(response, (bytes, bytearray)):
        response = bytes(response).decode("utf-8", errors="replace")
    print(response, file=out)


def _runner(action: str):
    def run(args: argparse.Namespace, handler: Any) -> None:
        curl_execute(handler, build_curl_request(action, args))

    return run


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--pretty", action="store_true", help="Response will be formatted")
    common.add_argument(
        "-o",
        "--output-format",
        dest="output_format",
        default="",
        help="Output format if supported by cluster, else, the default format. Example json, yaml",
    )
    common.add_argument(
        "-f",
        "--filter-path",
        dest="filter_path",
        default="",
        help="Filter output fields returned by the cluster. Use comma ',' to separate list of filters",
    )
    return common


def add_curl_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Register ``curl`` with its delete, get, post and put sub-commands.

    Each command stores ``run(args, handler)`` and ``command_name`` as defaults.
    """
    parser = subparsers.add_parser(
        CURL_COMMAND_NAME,
        help="Manage platform features",
        description="Use the curl command to execute any REST API calls against the cluster.",
    )
    parser.set_defaults(
        command_name=CURL_COMMAND_NAME, run=lambda args, handler: parser.print_help()
    )
    commands = parser.add_subparsers(dest="curl_command", metavar="sub-command")
    common = _common_options()

    for action in ACTIONS:
        verb = action.upper()
        sub = commands.add_parser(
            action,
            parents=[common],
            help=f"{action.capitalize()} command to execute requests against cluster",
            description=f"{action.capitalize()} command enables you to run any {verb} API against cluster",
            epilog="Examples:\n" + _EXAMPLES[action],
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        sub.add_argument("-P", "--path", required=True, help="URL path for the REST API")
        sub.add_argument(
            "-q", "--query-params", dest="query_params", default="", help=_QUERY_HELP
        )
        if action != "delete":
            sub.add_argument("-d", "--data", default="", help=_DATA_HELP)
        sub.add_argument("-H", "--headers", default="", help=_HEADERS_HELP)
        sub.set_defaults(command_name=action, run=_runner(action))
    return parser