"""GET with a deadline on the whole exchange, not just each socket read."""
import time

import requests

CHUNK_SIZE = 8192


def get_within(http, url, timeout, timer=time.monotonic, **kwargs):
    """Return ``(response, body)`` or raise ``requests.Timeout`` once ``timeout`` seconds have passed.

    requests applies ``timeout`` per connect/read, so a server trickling bytes
    could hold the caller forever; the body is streamed and checked against
    one deadline instead.
    """
    deadline = timer() + timeout
    resp = http.get(url, timeout=timeout, stream=True, **kwargs)
    try:
        chunks = []
        for chunk in resp.iter_content(CHUNK_SIZE):
            if timer() > deadline:
                raise requests.Timeout(f"{url} did not complete within {timeout}s")
            chunks.append(chunk)
        if timer() > deadline:
            raise requests.Timeout(f"{url} did not complete within {timeout}s")
    finally:
        resp.close()
    return resp, b''.join(chunks)
