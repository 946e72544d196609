from contextlib import contextmanager

from pcmk_reconcile import settings

COMMAND_COMPLETIONS = {
    "cibadmin": settings.cibadmin_exec,
    "crm_attribute": settings.crm_attribute_exec,
}


def complete_command(command):
    for shortcut, full_path in COMMAND_COMPLETIONS.items():
        if command[0] == shortcut:
            return [full_path] + command[1:]
    return command


def bad_call(order_num, expected_command, entered_command):
    return "As {0}. command expected\n    '{1}'\nbut was\n    '{2}'".format(
        order_num, expected_command, entered_command
    )


class Call:
    def __init__(
        self,
        command,
        stdout="",
        stderr="",
        returncode=0,
        exception=None,
    ):
        """
        exception -- raised instead of returning the command output, used for
            simulating timeouts
        """
        self.command = complete_command(command)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.exception = exception

    def __repr__(self):
        return str("<Runner '{0}' returncode='{1}'>").format(
            self.command, self.returncode
        )


class Runner:
    """
    Command runner returning prepared outputs of expected commands in the
    expected order
    """

    def __init__(self, call_list=None, env_vars=None):
        self.__call_list = list(call_list or [])
        self.__env_vars = env_vars if env_vars else {}
        self.__launched = 0
        self.time_limits = []

    @property
    def env_vars(self):
        return dict(self.__env_vars)

    def add_calls(self, call_list):
        self.__call_list.extend(call_list)

    @contextmanager
    def time_limit(self, seconds):
        self.time_limits.append(seconds)
        yield

    @staticmethod
    def remaining_time():
        return None

    def run(self, args, stdin_string=None, env_extend=None):
        del stdin_string, env_extend
        order_num = self.__launched + 1
        if self.__launched >= len(self.__call_list):
            raise AssertionError(
                "No more commands expected but was\n    '{0}'".format(args)
            )
        call = self.__call_list[self.__launched]
        if list(args) != call.command:
            raise AssertionError(bad_call(order_num, call.command, args))
        self.__launched += 1
        if call.exception is not None:
            raise call.exception
        return call.stdout, call.stderr, call.returncode

    def assert_everything_launched(self):
        if self.__launched != len(self.__call_list):
            raise AssertionError(
                "Not all expected commands have been launched:\n    {0}".format(
                    "\n    ".join(
                        repr(call)
                        for call in self.__call_list[self.__launched :]
                    )
                )
            )
