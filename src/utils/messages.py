from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever a line is added, edited or removed, so the cart table
    and totals get redrawn
    """

    bubble = True


class CheckoutCompletedMessage(Message):
    """
    Fired after a checkout commits.
    Listened to by the journal (stock, transaction list) and the sidebar;
    screens in other modes pick the change up on resume.
    """

    bubble = True

    def __init__(self, transaction_count: int) -> None:
        super().__init__()
        self.transaction_count = transaction_count


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
