"""Order lifecycle: new -> preparing -> ready -> delivered, or cancelled."""

NEW = "new"
PREPARING = "preparing"
READY = "ready"
DELIVERED = "delivered"
CANCELLED = "cancelled"

STATUSES = (NEW, PREPARING, READY, DELIVERED, CANCELLED)
HAPPY_PATH = (NEW, PREPARING, READY, DELIVERED)
FORWARD = {NEW: PREPARING, PREPARING: READY, READY: DELIVERED}
CANCELLABLE = frozenset({NEW, PREPARING})
TERMINAL = frozenset({DELIVERED, CANCELLED})
PENDING = (NEW, PREPARING)

STATUS_LABELS = {
    NEW: "New",
    PREPARING: "Preparing",
    READY: "Ready",
    DELIVERED: "Delivered",
    CANCELLED: "Cancelled",
}

STATUS_MESSAGES = {
    NEW: "Your order has been received and will be prepared shortly.",
    PREPARING: "Your order is being prepared.",
    READY: "Your order is ready!",
    DELIVERED: "Your order has been delivered. Enjoy your meal!",
    CANCELLED: "Your order has been cancelled.",
}

# Sound names played by the client
CUE_NEW_ORDER = "new-order"
CUE_STATUS_CHANGE = "status-change"


class InvalidTransition(Exception):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change order from {current} to {target}")


def next_status(current):
    """Status one step ahead on the forward path."""
    if current not in FORWARD:
        raise InvalidTransition(current, "next")
    return FORWARD[current]


def can_transition(current, target):
    if target == CANCELLED:
        return current in CANCELLABLE
    return FORWARD.get(current) == target


def ensure_transition(current, target):
    if target not in STATUSES or not can_transition(current, target):
        raise InvalidTransition(current, target)
    return target


def progress(current):
    """Steps of the forward path flagged as completed or active."""
    if current == CANCELLED:
        return []
    reached = HAPPY_PATH.index(current) if current in HAPPY_PATH else -1
    return [
        {
            "status": status,
            "label": STATUS_LABELS[status],
            "completed": idx <= reached,
            "active": idx == reached,
        }
        for idx, status in enumerate(HAPPY_PATH)
    ]


def describe(current):
    return {
        "status": current,
        "label": STATUS_LABELS.get(current, current),
        "message": STATUS_MESSAGES.get(current, ""),
        "terminal": current in TERMINAL,
        "next": FORWARD.get(current),
        "can_cancel": current in CANCELLABLE,
        "progress": progress(current),
    }
