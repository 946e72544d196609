from dataclasses import dataclass
from typing import (
    List,
    Mapping,
    Optional,
    Union,
)

from pcmk_reconcile.common.str_tools import (
    format_list,
    format_plural,
)

from . import codes
from .item import ReportItemMessage


def _format_optional(value: Optional[str], template: str = "{} ") -> str:
    return template.format(value) if value else ""


@dataclass(frozen=True)
class RequiredOptionsAreMissing(ReportItemMessage):
    """
    Required option has not been specified, command cannot continue

    option_names -- are required but was not entered
    option_type -- describes the option
    """

    option_names: List[str]
    option_type: Optional[str] = None
    _code = codes.REQUIRED_OPTIONS_ARE_MISSING

    @property
    def message(self) -> str:
        return (
            "required {desc}{_option} {option_names_list} {_is} missing"
        ).format(
            desc=_format_optional(self.option_type),
            option_names_list=format_list(self.option_names),
            _option=format_plural(self.option_names, "option"),
            _is=format_plural(self.option_names, "is", "are"),
        )


@dataclass(frozen=True)
class InvalidOptionValue(ReportItemMessage):
    """
    Specified value is not valid for the option

    option_name -- specified option name whose value is not valid
    option_value -- specified value which is not valid
    allowed_values -- a list or description of allowed values
    """

    option_name: str
    option_value: str
    allowed_values: Union[List[str], str, None]
    _code = codes.INVALID_OPTION_VALUE

    @property
    def message(self) -> str:
        template = "'{option_value}' is not a valid {option_name} value"
        if self.allowed_values:
            template += ", use {hint}"
        return template.format(
            hint=(
                format_list(self.allowed_values)
                if isinstance(self.allowed_values, list)
                else self.allowed_values
            ),
            option_name=self.option_name,
            option_value=self.option_value,
        )


@dataclass(frozen=True)
class InvalidScore(ReportItemMessage):
    """
    Specified score value is not valid

    score -- specified score value
    """

    score: str
    _code = codes.INVALID_SCORE

    @property
    def message(self) -> str:
        return (
            f"invalid score '{self.score}', use integer or INFINITY or "
            "-INFINITY (or inf, -inf)"
        )


@dataclass(frozen=True)
class RunExternalProcessStarted(ReportItemMessage):
    """
    Information about running an external process

    command -- the external process command
    stdin -- passed to the external process via its stdin
    environment -- environment variables for the command
    """

    command: str
    stdin: Optional[str]
    environment: Mapping[str, str]
    _code = codes.RUN_EXTERNAL_PROCESS_STARTED

    @property
    def message(self) -> str:
        return (
            "Running: {command}\nEnvironment:{env_part}\n{stdin_part}"
        ).format(
            command=self.command,
            stdin_part=_format_optional(
                self.stdin, "--Debug Input Start--\n{}\n--Debug Input End--\n"
            ),
            env_part=(
                ""
                if not self.environment
                else "\n"
                + "\n".join(
                    [
                        f"  {key}={val}"
                        for key, val in sorted(self.environment.items())
                    ]
                )
            ),
        )


@dataclass(frozen=True)
class RunExternalProcessFinished(ReportItemMessage):
    """
    Information about result of running an external process

    command -- the external process command
    return_value -- external process's return (exit) code
    stdout -- external process's stdout
    stderr -- external process's stderr
    """

    command: str
    return_value: int
    stdout: str
    stderr: str
    _code = codes.RUN_EXTERNAL_PROCESS_FINISHED

    @property
    def message(self) -> str:
        return (
            f"Finished running: {self.command}\n"
            f"Return value: {self.return_value}\n"
            "--Debug Stdout Start--\n"
            f"{self.stdout}\n"
            "--Debug Stdout End--\n"
            "--Debug Stderr Start--\n"
            f"{self.stderr}\n"
            "--Debug Stderr End--\n"
        )


@dataclass(frozen=True)
class RunExternalProcessError(ReportItemMessage):
    """
    Attempt to run an external process failed

    command -- the external process command
    reason -- error description
    """

    command: str
    reason: str
    _code = codes.RUN_EXTERNAL_PROCESS_ERROR

    @property
    def message(self) -> str:
        return f"unable to run command {self.command}: {self.reason}"


@dataclass(frozen=True)
class RunExternalProcessFailed(ReportItemMessage):
    """
    An external process exited with a non-zero code

    command -- the external process command
    return_value -- external process's return (exit) code
    reason -- stderr and stdout of the process
    """

    command: str
    return_value: int
    reason: str
    _code = codes.RUN_EXTERNAL_PROCESS_FAILED

    @property
    def message(self) -> str:
        return (
            f"Command execution has failed: {self.command} "
            f"(return value {self.return_value})"
            + _format_optional(self.reason, ": {}")
        )


@dataclass(frozen=True)
class RunExternalProcessTimeout(ReportItemMessage):
    """
    An external process has been killed as it did not finish in time

    command -- the external process command
    timeout -- seconds the process was allowed to run
    """

    command: str
    timeout: float
    _code = codes.RUN_EXTERNAL_PROCESS_TIMEOUT

    @property
    def message(self) -> str:
        return (
            f"Command {self.command} did not finish in {self.timeout:g} "
            "seconds"
        )


@dataclass(frozen=True)
class RunExternalProcessDryRun(ReportItemMessage):
    """
    Debug mode is enabled, a command changing the cluster was not run

    command -- the external process command
    """

    command: str
    _code = codes.RUN_EXTERNAL_PROCESS_DRY_RUN

    @property
    def message(self) -> str:
        return f"Debug mode, not running: {self.command}"


@dataclass(frozen=True)
class AttemptDeadlineExceeded(ReportItemMessage):
    """
    An attempt returned but it took longer than allowed

    timeout -- seconds the attempt was allowed to run
    """

    timeout: float
    _code = codes.ATTEMPT_DEADLINE_EXCEEDED

    @property
    def message(self) -> str:
        return f"Attempt did not finish in {self.timeout:g} seconds"


@dataclass(frozen=True)
class RetryAttemptFailed(ReportItemMessage):
    """
    One attempt of a retried operation has failed

    attempt -- number of the failed attempt
    attempt_count -- how many attempts are allowed
    reason -- why the attempt failed
    """

    attempt: int
    attempt_count: int
    reason: str
    _code = codes.RETRY_ATTEMPT_FAILED

    @property
    def message(self) -> str:
        return (
            f"Execution failure ({self.attempt}/{self.attempt_count}): "
            f"{self.reason}"
        )


@dataclass(frozen=True)
class RetryExhausted(ReportItemMessage):
    """
    All attempts of a retried operation have failed

    attempt_count -- how many attempts have been made
    seconds -- attempt count multiplied by the delay between attempts
    """

    attempt_count: int
    seconds: float
    _code = codes.RETRY_EXHAUSTED

    @property
    def message(self) -> str:
        return f"Execution timeout after {self.seconds:g} seconds!"


@dataclass(frozen=True)
class CibLoadError(ReportItemMessage):
    """
    Cannot load cib from cibadmin, cibadmin failed or returned nothing

    reason -- error description
    """

    reason: str
    _code = codes.CIB_LOAD_ERROR

    @property
    def message(self) -> str:
        return "Could not dump CIB XML" + _format_optional(self.reason, ": {}")


@dataclass(frozen=True)
class CibLoadErrorBadFormat(ReportItemMessage):
    """
    Cib is not a valid xml document
    """

    reason: str
    _code = codes.CIB_LOAD_ERROR_BAD_FORMAT

    @property
    def message(self) -> str:
        return f"unable to get cib, {self.reason}"


@dataclass(frozen=True)
class CibCannotFindMandatorySection(ReportItemMessage):
    """
    CIB is missing a section which is required to be present

    section -- name of the missing section (element name or path)
    """

    section: str
    _code = codes.CIB_CANNOT_FIND_MANDATORY_SECTION

    @property
    def message(self) -> str:
        return f"Unable to get '{self.section}' section of cib"


@dataclass(frozen=True)
class CibPatchBuildError(ReportItemMessage):
    """
    An xml element for a cib patch cannot be built from the supplied data

    element_tag -- tag of the element to be built
    data -- textual representation of the supplied data
    """

    element_tag: str
    data: str
    _code = codes.CIB_PATCH_BUILD_ERROR

    @property
    def message(self) -> str:
        return (
            f"Could not create XML patch '{self.element_tag}' from "
            f"{self.data}"
        )


@dataclass(frozen=True)
class ConstraintPrimitiveNotFound(ReportItemMessage):
    """
    A primitive referenced by a constraint does not exist

    constraint_id -- id of the constraint
    primitive_id -- id of the missing primitive
    """

    constraint_id: str
    primitive_id: str
    _code = codes.CONSTRAINT_PRIMITIVE_NOT_FOUND

    @property
    def message(self) -> str:
        return (
            f"Primitive '{self.primitive_id}' does not exist, constraint "
            f"'{self.constraint_id}' cannot be set"
        )


@dataclass(frozen=True)
class ConstraintIncomplete(ReportItemMessage):
    """
    Data of a constraint does not contain all the required fields

    constraint_id -- id of the constraint, may be empty
    missing_fields -- names of the missing fields
    """

    constraint_id: str
    missing_fields: List[str]
    _code = codes.CONSTRAINT_INCOMPLETE

    @property
    def message(self) -> str:
        return (
            "Constraint {_id}does not contain all the required fields, "
            "missing {_field} {fields}"
        ).format(
            _id=_format_optional(self.constraint_id, "'{}' "),
            _field=format_plural(self.missing_fields, "field"),
            fields=format_list(self.missing_fields),
        )


@dataclass(frozen=True)
class IdBelongsToUnexpectedType(ReportItemMessage):
    """
    Specified id exists but for another element than expected.
    """

    id: str  # pylint: disable=invalid-name
    expected_types: List[str]
    current_type: str
    _code = codes.ID_BELONGS_TO_UNEXPECTED_TYPE

    @property
    def message(self) -> str:
        return (
            f"'{self.id}' is already used by '{self.current_type}', "
            f"expected {format_list(self.expected_types, ' or ')}"
        )


@dataclass(frozen=True)
class ClusterDebugReport(ReportItemMessage):
    """
    Human readable state of the cluster produced in debug mode

    tag -- where the report has been made
    report -- the report text
    """

    tag: str
    report: str
    _code = codes.CLUSTER_DEBUG_REPORT

    @property
    def message(self) -> str:
        return self.report
