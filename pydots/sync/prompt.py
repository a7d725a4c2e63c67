"""Interactive confirmation for pull operations."""

import click


class ConfirmationGate:
    """Asks the user to confirm each file before it is copied.

    The prompt blocks until a line is read from standard input. ``y``,
    ``yes``, ``n`` and ``no`` are accepted in any case, an empty answer picks
    the default and anything else asks again.
    """

    def __init__(self, assume_yes: bool = False):
        """Initialize the gate.

        Args:
            assume_yes: Confirm everything without asking
        """
        self.assume_yes = assume_yes

    def confirm(self, prompt: str, default: bool = True) -> bool:
        """Ask a yes/no question.

        Args:
            prompt: Question to show
            default: Answer used when the user just presses enter

        Returns:
            True if the user confirmed

        Raises:
            click.Abort: If standard input is closed
        """
        if self.assume_yes:
            return True
        return click.confirm(prompt, default=default)
