import json
import sys
from typing import (
    Any,
    List,
)

from pcmk_reconcile.cli.errors import CmdLineInputError
from pcmk_reconcile.cli.output import error
from pcmk_reconcile.common.interface import dto
from pcmk_reconcile.common.pacemaker.declaration import (
    ATTRIBUTE_KINDS,
    CONSTRAINT_KINDS,
    KIND_PRIMITIVE,
)
from pcmk_reconcile.common.types import StringSequence
from pcmk_reconcile.lib.commands import (
    cluster,
    reconcile,
)
from pcmk_reconcile.lib.declaration import load_declaration
from pcmk_reconcile.lib.env import LibraryEnvironment


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=4))


def _load_json(argv: StringSequence) -> Any:
    if not argv or argv[0] == "-":
        return json.load(sys.stdin)
    try:
        with open(argv[0], "r") as input_file:
            return json.load(input_file)
    except OSError as e:
        raise error(f"Unable to read {argv[0]}: {e.strerror}") from e


def apply_cmd(env: LibraryEnvironment, argv: StringSequence) -> None:
    """
    Options: no options
    """
    if len(argv) > 1:
        raise CmdLineInputError()
    data = _load_json(argv)
    if not isinstance(data, list) or not all(
        isinstance(item, dict) for item in data
    ):
        raise error("Declarations must be a json list of objects")
    declaration_list = [load_declaration(item) for item in data]
    _print_json(
        [
            dto.to_dict(result)
            for result in reconcile.apply(env, declaration_list)
        ]
    )


def list_cmd(env: LibraryEnvironment, argv: StringSequence) -> None:
    if len(argv) != 1:
        raise CmdLineInputError()
    kind = argv[0]
    result_list: List[Any]
    if kind in CONSTRAINT_KINDS:
        result_list = cluster.list_constraints(env, kind)
    elif kind in ATTRIBUTE_KINDS:
        result_list = cluster.list_attributes(env, kind)
    elif kind == KIND_PRIMITIVE:
        result_list = cluster.list_primitives(env)
    else:
        raise CmdLineInputError(f"Unknown kind '{kind}'")
    _print_json([dto.to_dict(item) for item in result_list])


def report_cmd(env: LibraryEnvironment, argv: StringSequence) -> None:
    if len(argv) > 1:
        raise CmdLineInputError()
    print(cluster.get_debug_report(env, argv[0] if argv else None), end="")


def wait_cmd(env: LibraryEnvironment, argv: StringSequence) -> None:
    if not argv:
        raise CmdLineInputError()
    event, args = argv[0], argv[1:]
    if event == cluster.WAIT_ONLINE:
        if args:
            raise CmdLineInputError()
        reached = cluster.wait(env, event)
    else:
        if not args or len(args) > 2:
            raise CmdLineInputError()
        reached = cluster.wait(env, event, *args)
    if not reached:
        raise error(f"Waiting for '{' '.join(argv)}' timed out")
