# tagias_api_client.py - shared HTTP transport for the TAGIAS client, wrapping requests
import requests


class APIClient:
    def __init__(self, base_url, timeout=None, headers=None):
        self.base_url = base_url.rstrip('/')
        self.session = requests.Session()
        self.timeout = timeout
        if headers:
            self.session.headers.update(headers)

    def _url(self, endpoint):
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def request(self, method, endpoint, json_payload=None, headers=None):
        url = self._url(endpoint)
        if json_payload is not None:
            return self.session.request(method, url, json=json_payload, headers=headers, timeout=self.timeout)
        return self.session.request(method, url, headers=headers, timeout=self.timeout)

    def safe_headers(self):
        """Session headers with the Authorization value redacted, for logging."""
        headers = dict(self.session.headers)
        if "Authorization" in headers:
            headers["Authorization"] = headers["Authorization"].split(" ", 1)[0] + " [REDACTED]"
        return headers

    def close(self):
        self.session.close()
