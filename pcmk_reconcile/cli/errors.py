from typing import Optional


class CmdLineInputError(Exception):
    """
    an incorrect command has been entered in the command line
    """

    def __init__(self, message: Optional[str] = None) -> None:
        """
        message -- explains what was wrong with the entered command, usage is
            printed if not specified
        """
        super().__init__(message)
        self.message = message
