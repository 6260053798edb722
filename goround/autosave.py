"""Debounced autosave for the project being edited.

The controller is a four-state machine over SaveStatus driven by three
events:

    state     edit       debounce_elapsed        save_completed(ok / failed)
    -------   --------   ---------------------   ---------------------------
    saved     unsaved    -                       -
    unsaved   unsaved    saving (start save)     unsaved, timer re-armed
    saving    unsaved    -                       saved / error
    error     unsaved    -                       -

Every edit (re-)arms the debounce timer, so edits inside one window
coalesce into a single save. A save is never started while another is in
flight; an edit that lands mid-save moves the state back to ``unsaved`` and
is picked up by a timer armed when the in-flight save completes. A failed
save leaves the controller in ``error`` until the next edit or manual save.
Saves hold a lock for their whole duration, so at most one ``save_project``
call runs at a time and concurrent requests go through in arrival order.

save_now() and close() form the cancellation channel: both cancel the
pending timer. save_now() saves immediately; close() makes one best-effort
save when there are unsaved changes and only logs a failure.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from goround.schemas.carousel_schema import Project
from goround.schemas.config import AutoSaveConfig
from goround.schemas.export_schema import SaveStatus
from goround.storage.base import StorageProvider

logger = logging.getLogger(__name__)

SaveCallback = Callable[[Project], Optional[Awaitable[None]]]
ErrorCallback = Callable[[Exception], Optional[Awaitable[None]]]


async def _notify(callback: Optional[Callable], *args) -> None:
    if callback is None:
        return
    result = callback(*args)
    if asyncio.iscoroutine(result):
        await result


class AutoSaveController:
    """Coordinates debounced and manual saves of one project.

    Args:
        storage: Provider whose ``save_project`` persists the project.
        project: The project being edited; replace it with set_project().
        config: Debounce delay and enabled flag.
        on_save: Called with the project after each successful save.
        on_error: Called with the exception after each failed save.
    """

    def __init__(
        self,
        storage: StorageProvider,
        project: Optional[Project] = None,
        config: Optional[AutoSaveConfig] = None,
        on_save: Optional[SaveCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.storage = storage
        self.project = project
        self.config = config or AutoSaveConfig()
        self.on_save = on_save
        self.on_error = on_error
        self.status = SaveStatus.SAVED
        self.last_error: Optional[Exception] = None
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._save_lock = asyncio.Lock()
        self._closed = False

    # -- observable state --

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self.config = self.config.model_copy(update={"enabled": value})
        if not value:
            self._cancel_timer()

    @property
    def has_unsaved_changes(self) -> bool:
        return self.status in (SaveStatus.UNSAVED, SaveStatus.ERROR)

    @property
    def is_saving(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def status_text(self) -> str:
        return self.status.label

    def set_project(self, project: Optional[Project]) -> None:
        """Switch to another project. Pending changes of the previous one are dropped."""
        self._cancel_timer()
        self.project = project
        self.status = SaveStatus.SAVED
        self.last_error = None

    # -- events --

    def edit(self) -> None:
        """Record a change to the project and (re-)arm the debounce timer.

        Must be called from code running inside the event loop: the timer is
        a task on the running loop, and RuntimeError is raised without one.
        """
        self.status = SaveStatus.UNSAVED
        if self.enabled and self.project is not None:
            self._arm_timer()

    async def debounce_elapsed(self) -> None:
        """Start a save if changes are pending and no save is in flight."""
        self._timer = None
        if self.status != SaveStatus.UNSAVED:
            return
        if self.is_saving:
            logger.debug("Save in flight, deferring autosave")
            return
        await self._save()

    async def save_completed(self, ok: bool, error: Optional[Exception] = None) -> None:
        if self.status == SaveStatus.UNSAVED:
            # Edited while saving: the newer changes still need a save.
            if self.enabled and self._timer is None:
                self._arm_timer()
        elif ok:
            self.status = SaveStatus.SAVED
        else:
            self.status = SaveStatus.ERROR

        if ok:
            self.last_error = None
            await _notify(self.on_save, self.project)
        else:
            self.last_error = error
            await _notify(self.on_error, error)

    # -- cancellation channel --

    async def save_now(self) -> bool:
        """Cancel the pending timer and save immediately. Returns success."""
        self._cancel_timer()
        if self.project is None:
            return False
        return await self._save()

    async def close(self) -> None:
        """Tear down: cancel the timer and flush unsaved changes once, best effort."""
        self._closed = True
        self._cancel_timer()
        async with self._save_lock:
            if self.project is None or not self.has_unsaved_changes:
                return
            try:
                await self.storage.save_project(self.project)
                self.status = SaveStatus.SAVED
                logger.info(f"Saved '{self.project.name}' on close")
            except Exception as e:
                logger.warning(f"Final save of '{self.project.name}' failed: {e}")

    # -- internals --

    def _arm_timer(self) -> None:
        self._cancel_timer()
        if self._closed:
            return
        self._timer = asyncio.get_running_loop().create_task(self._debounce(self.config.delay_seconds))

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounce(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.debounce_elapsed()

    async def _save(self) -> bool:
        """Run one save in its own task once any earlier save has finished.

        The lock is held until save_completed() has run, so the on_save and
        on_error callbacks must not call save_now() or close().
        """
        async with self._save_lock:
            if self.project is None:
                return False
            self.status = SaveStatus.SAVING
            self._in_flight = asyncio.get_running_loop().create_task(self._run_save(self.project))
            return await self._in_flight

    async def _run_save(self, project: Project) -> bool:
        try:
            await self.storage.save_project(project)
        except Exception as e:
            logger.error(f"Autosave of '{project.name}' failed: {e}")
            self._in_flight = None
            await self.save_completed(False, e)
            return False
        self._in_flight = None
        logger.info(f"Saved '{project.name}'")
        await self.save_completed(True)
        return True
