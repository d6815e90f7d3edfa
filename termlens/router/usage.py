# router/usage.py
import threading


class UsageTracker:
    """
    Contador de tokens por modelo, en memoria y solo para este proceso.
    Los adaptadores lo consultan en is_available() y lo alimentan
    después de cada llamada. Seguro entre hilos.
    """

    def __init__(self):
        self._lock   = threading.Lock()
        self._tokens: dict[str, int] = {}

    def add(self, model: str, tokens: int) -> None:
        with self._lock:
            self._tokens[model] = self._tokens.get(model, 0) + tokens

    def used(self, model: str) -> int:
        with self._lock:
            return self._tokens.get(model, 0)
