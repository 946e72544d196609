from typing import Set

from lxml.etree import _Element

from pcmk_reconcile.lib.pacemaker.values import sanitize_id


class IdProvider:
    """
    Book ids of one new cib subtree and generate new ids accordingly

    Ids outside of the subtree are not checked, the subtree replaces its
    previous version as a whole so its ids may repeat there.
    """

    def __init__(self) -> None:
        self._booked_ids: Set[str] = set()

    def allocate_id(self, proposed_id: str) -> str:
        """
        Generate a new unique id based on the proposal and keep track of it

        proposed_id -- requested id
        """
        proposed_id = sanitize_id(proposed_id)
        final_id = proposed_id
        counter = 1
        while final_id in self._booked_ids:
            final_id = f"{proposed_id}-{counter}"
            counter += 1
        self._booked_ids.add(final_id)
        return final_id

    def book_ids(self, *id_list: str) -> None:
        self._booked_ids.update(id_list)


def create_subelement_id(
    context_element: _Element, suffix: str, id_provider: IdProvider
) -> str:
    return id_provider.allocate_id(
        "{0}-{1}".format(context_element.get("id", context_element.tag), suffix)
    )
