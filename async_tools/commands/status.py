"""Mémoire du dernier état connu du processus enfant."""

from dataclasses import replace
from typing import Optional

from async_tools.commands.base import ProcessStatus
from async_tools.commands.process import ProcessHandle


class StatusCache:
    """Cache de l'état d'un ProcessHandle.

    Une fois l'enfant observé terminé, l'instantané est figé et le
    système n'est plus interrogé : le code de sortie observé reste
    disponible même après la fermeture du handle.
    """

    def __init__(self, handle: ProcessHandle) -> None:
        """Initialise le cache sans interroger le système.

        Args:
            handle: Handle dont l'état est mémorisé.
        """
        self._handle = handle
        self._snapshot: Optional[ProcessStatus] = None

    @property
    def snapshot(self) -> Optional[ProcessStatus]:
        """Dernier instantané connu, sans interrogation."""
        return self._snapshot

    @property
    def is_frozen(self) -> bool:
        """True si l'enfant a été observé terminé."""
        return self._snapshot is not None and not self._snapshot.running

    def current(self) -> Optional[ProcessStatus]:
        """Retourne l'état, en interrogeant le système si nécessaire.

        Returns:
            Instantané courant, None si le processus n'a jamais été
            observé ni lancé.
        """
        if not self.is_frozen and self._handle.is_open:
            self._snapshot = self._handle.poll_status()
        return self._snapshot

    def finished_exit_code(self) -> Optional[int]:
        """Code de sortie de l'instantané figé, s'il est connu."""
        if self.is_frozen:
            return self._snapshot.exit_code
        return None

    def mark_finished(self, exit_code: Optional[int]) -> ProcessStatus:
        """Force running=False après la fermeture du handle.

        Un code déjà connu dans l'instantané figé est conservé.

        Args:
            exit_code: Code de sortie réconcilié.

        Returns:
            Instantané figé.
        """
        if self._snapshot is None:
            self._snapshot = ProcessStatus(
                running=False, pid=self._handle.pid, exit_code=exit_code
            )
        elif self._snapshot.running or self._snapshot.exit_code is None:
            self._snapshot = replace(
                self._snapshot, running=False, exit_code=exit_code
            )
        return self._snapshot
