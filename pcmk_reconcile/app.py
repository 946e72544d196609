import getopt
import json
import logging
import sys

from dacite import DaciteError

from pcmk_reconcile import settings
from pcmk_reconcile.cli import (
    commands,
    usage,
)
from pcmk_reconcile.cli.errors import CmdLineInputError
from pcmk_reconcile.cli.output import (
    ReportProcessorToConsole,
    error,
    print_to_stderr,
    process_library_reports,
)
from pcmk_reconcile.common.options import (
    PacemakerOptions,
    options_from_dict,
    validate_options,
)
from pcmk_reconcile.lib.env import LibraryEnvironment
from pcmk_reconcile.lib.errors import LibraryError

SHORT_OPTIONS = "hf:"
LONG_OPTIONS = ["help", "debug", "options=", "version"]

CMD_MAP = {
    "apply": commands.apply_cmd,
    "list": commands.list_cmd,
    "report": commands.report_cmd,
    "wait": commands.wait_cmd,
}


def _load_options(options_json: str) -> PacemakerOptions:
    try:
        data = json.loads(options_json)
    except json.JSONDecodeError as e:
        raise error(f"Unable to parse --options: {e.msg}") from e
    if not isinstance(data, dict):
        raise error("--options must be a json object")
    try:
        options = options_from_dict(data)
    except DaciteError as e:
        raise error(f"Invalid --options: {e}") from e
    report_list = validate_options(options)
    if report_list:
        process_library_reports(report_list)
    return options


def main(argv=None):
    # pylint: disable=too-many-branches
    argv = argv if argv is not None else sys.argv[1:]
    try:
        parsed_options, argv = getopt.gnu_getopt(
            argv, SHORT_OPTIONS, LONG_OPTIONS
        )
    except getopt.GetoptError as err:
        error(str(err))
        print_to_stderr(usage.main())
        sys.exit(1)

    cib_file = None
    debug = False
    options = PacemakerOptions()
    for opt, val in parsed_options:
        if opt in ("-h", "--help"):
            print(usage.main())
            sys.exit()
        elif opt == "--version":
            print(settings.pcmk_reconcile_version)
            sys.exit()
        elif opt == "-f":
            cib_file = val
        elif opt == "--debug":
            debug = True
        elif opt == "--options":
            options = _load_options(val)
    if debug:
        options = options.merge(debug_enabled=True)

    if not argv or argv[0] not in CMD_MAP:
        print_to_stderr(usage.main())
        sys.exit(1)

    env = LibraryEnvironment(
        logging.getLogger("pcmk_reconcile"),
        ReportProcessorToConsole(debug=options.debug_enabled),
        options,
        cib_file=cib_file,
    )
    try:
        CMD_MAP[argv[0]](env, argv[1:])
    except LibraryError as e:
        if e.output:
            sys.stderr.write(e.output)
            sys.exit(1)
        process_library_reports(e.args)
    except json.JSONDecodeError as e:
        raise error(f"Unable to parse input data: {e.msg}") from e
    except DaciteError as e:
        raise error(str(e)) from e
    except CmdLineInputError as e:
        if e.message:
            error(e.message)
        else:
            print_to_stderr(usage.main())
        sys.exit(1)


if __name__ == "__main__":
    main()
