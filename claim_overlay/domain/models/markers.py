"""Names of the elements the overlay adds to a page."""

OVERLAY_CONTAINER_ID = "claim-overlay-container"
HIGHLIGHT_CLASS = "claim-overlay-highlight"
TOOLTIP_CLASS = "claim-overlay-tooltip"

CLAIM_ID_ATTR = "data-claim-id"
RATING_ATTR = "data-rating"

# Elements carrying these classes belong to the overlay, never to host content.
OVERLAY_CLASSES = frozenset({HIGHLIGHT_CLASS, TOOLTIP_CLASS})


def class_list(element) -> list:
    """Classes of an element whether parsed (list) or set programmatically (str)."""
    classes = element.get("class") or []
    if isinstance(classes, str):
        return classes.split()
    return list(classes)
