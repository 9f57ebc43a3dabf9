import anyio
from fastapi.testclient import TestClient as FastAPITestClient


class TestClient(FastAPITestClient):
    """
    FastAPI's TestClient, returning 500 responses instead of re-raising server errors
    and force-closing lifespan streams to avoid lingering ResourceWarning noise.
    """

    __test__ = False

    def __init__(self, app, *args, raise_server_exceptions: bool = False, **kwargs):
        super().__init__(
            app, *args, raise_server_exceptions=raise_server_exceptions, **kwargs
        )

    def __exit__(self, *args):
        result = super().__exit__(*args)
        for stream_name in ("stream_send", "stream_receive"):
            stream = getattr(self, stream_name, None)
            if stream:
                try:
                    anyio.run(stream.aclose)
                except Exception:
                    pass
        return result
