from .types import MessageCode as M

ATTEMPT_DEADLINE_EXCEEDED = M("ATTEMPT_DEADLINE_EXCEEDED")
CIB_CANNOT_FIND_MANDATORY_SECTION = M("CIB_CANNOT_FIND_MANDATORY_SECTION")
CIB_LOAD_ERROR = M("CIB_LOAD_ERROR")
CIB_LOAD_ERROR_BAD_FORMAT = M("CIB_LOAD_ERROR_BAD_FORMAT")
CIB_PATCH_BUILD_ERROR = M("CIB_PATCH_BUILD_ERROR")
CLUSTER_DEBUG_REPORT = M("CLUSTER_DEBUG_REPORT")
CONSTRAINT_INCOMPLETE = M("CONSTRAINT_INCOMPLETE")
CONSTRAINT_PRIMITIVE_NOT_FOUND = M("CONSTRAINT_PRIMITIVE_NOT_FOUND")
ID_BELONGS_TO_UNEXPECTED_TYPE = M("ID_BELONGS_TO_UNEXPECTED_TYPE")
INVALID_OPTION_VALUE = M("INVALID_OPTION_VALUE")
INVALID_SCORE = M("INVALID_SCORE")
REQUIRED_OPTIONS_ARE_MISSING = M("REQUIRED_OPTIONS_ARE_MISSING")
RETRY_ATTEMPT_FAILED = M("RETRY_ATTEMPT_FAILED")
RETRY_EXHAUSTED = M("RETRY_EXHAUSTED")
RUN_EXTERNAL_PROCESS_DRY_RUN = M("RUN_EXTERNAL_PROCESS_DRY_RUN")
RUN_EXTERNAL_PROCESS_ERROR = M("RUN_EXTERNAL_PROCESS_ERROR")
RUN_EXTERNAL_PROCESS_FAILED = M("RUN_EXTERNAL_PROCESS_FAILED")
RUN_EXTERNAL_PROCESS_FINISHED = M("RUN_EXTERNAL_PROCESS_FINISHED")
RUN_EXTERNAL_PROCESS_STARTED = M("RUN_EXTERNAL_PROCESS_STARTED")
RUN_EXTERNAL_PROCESS_TIMEOUT = M("RUN_EXTERNAL_PROCESS_TIMEOUT")
