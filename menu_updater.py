"""
Keep a bookmarklet menu in sync with the bookmark store
"""

import logging
import threading
from typing import Callable, Optional

from bookmarklet_tree import Node, RawNode, count_bookmarklets, reduce
from menu_config import MenuConfig
from menu_host import MenuHost, build_menu, show_loading

logger = logging.getLogger(__name__)

# Bookmark store events that change the tree
BOOKMARK_CHANGE_EVENTS = ("created", "removed", "changed", "moved", "children_reordered")


class MenuUpdater:
    """
    Owns the current bookmarklet tree and rebuilds the menu when asked to.

    `load_tree` returns a fresh snapshot of the raw bookmark tree each time it
    is called.
    """

    def __init__(self, load_tree: Callable[[], RawNode], host: MenuHost, config: MenuConfig,
                 on_update: Optional[Callable[[Optional[Node]], None]] = None):
        self.load_tree = load_tree
        self.host = host
        self.config = config
        self.on_update = on_update
        self._tree: Optional[Node] = None
        self._loaded = False
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.RLock()

    def show_loading(self):
        """Show a disabled menu while waiting for bookmarks"""
        with self._lock:
            show_loading(self.host, self.config)

    def update(self) -> Optional[Node]:
        """Reload the bookmarks and rebuild the menu"""
        with self._lock:
            raw = self.load_tree()
            self._tree = reduce(raw, self.config.untitled_title)
            self._loaded = True
            logger.info(f"Found {count_bookmarklets(self._tree)} bookmarklets")
            self.update_menu()
            return self._tree

    def update_menu(self):
        """Rebuild the menu from the current tree, without reloading bookmarks"""
        with self._lock:
            build_menu(self.host, self._tree, self.config)
            if self.on_update is not None:
                self.on_update(self._tree)

    def current_tree(self) -> Optional[Node]:
        with self._lock:
            if not self._loaded:
                self.update()
            return self._tree

    def request_recompute(self):
        """
        Schedule an update after the configured delay. Requests made while one
        is pending are merged into it.
        """
        with self._lock:
            if self._timer is not None:
                return
            self._timer = threading.Timer(self.config.update_delay, self._run_scheduled)
            self._timer.daemon = True
            self._timer.start()
            logger.debug(f"Update scheduled in {self.config.update_delay}s")

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def _run_scheduled(self):
        with self._lock:
            # Cancelled or replaced while this timer waited for the lock
            if self._timer is not threading.current_thread():
                return
            self._timer = None
        try:
            self.update()
        except Exception:
            # Runs on the timer thread
            logger.exception("Scheduled menu update failed")

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def set_flatten(self, flat_menu: bool):
        """Apply a changed "flat menu" preference"""
        with self._lock:
            if flat_menu == self.config.flat_menu:
                return
            self.config.flat_menu = flat_menu
            if self._loaded:
                self.update_menu()
