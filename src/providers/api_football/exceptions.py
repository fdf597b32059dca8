from typing import Optional


class UpstreamError(Exception):
    """
    Fallimento del provider: HTTP != 2xx, errore di rete (status=None),
    body non JSON o payload con errori API-Sports anche su HTTP 200.
    """

    def __init__(self, status: Optional[int], message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.path = path

    def to_dict(self):
        return {"status": self.status, "message": self.message, "path": self.path}
