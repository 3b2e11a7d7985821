"""Shared fixtures: a fake aiohttp session and synthetic WebLab pages."""

import pytest


class FakeResponse:
    """Stands in for ``aiohttp.ClientResponse`` inside ``async with``."""

    def __init__(self, status=200, body=""):
        self.status = status
        self._body = body

    async def text(self, encoding=None):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Records calls and replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False
        self.close_calls = 0

    def _next(self):
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self._next()

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    async def close(self):
        self.close_calls += 1
        self.closed = True


STUDENT_TITLE = "netid:abc123 studnr:4567890. Opens in new window"

SUBMISSIONS_PAGE = f"""
<html><body>
<table><tbody><tr><td>Filter</td></tr></tbody></table>
<table>
<thead><tr><th>Student</th></tr></thead>
<tbody>
  <tr>
    <td>
      <span>1</span>
      <a href="/dossier/321" title="{STUDENT_TITLE}"> Alice Example </a>
      <div><span> alice@example.com </span></div>
    </td>
    <td><a href="/assignment/99/submission/321/view">view</a></td>
    <td>
      <span class="text-success" id="status-5f2c">started</span>
      <span>-</span>
      <div><span>12 spec tests</span></div>
    </td>
    <td><span class="text-success">done</span></td>
    <td><span>Grade: 8.50</span></td>
    <td><span class="text-muted">no</span></td>
  </tr>
  <tr>
    <td>
      <span>2</span>
      <a href="/dossier/654" title="netid:bob77 studnr:1234567. Opens in new window">Bob</a>
      <div><span>bob@example.com</span></div>
      <span>not enrolled for grade</span>
    </td>
    <td><a href="/assignment/99/submission/654/view">view</a></td>
    <td><span class="text-muted">not started</span></td>
    <td><span class="text-muted">no</span></td>
    <td><span> </span>Grade 0.00</td>
    <td><span class="text-success">yes</span></td>
  </tr>
</tbody>
</table>
<div id="5f2c">
  <div>
    <span>Status</span>
    <p><span>saved 2023-04-01 12:00:00 before the deadline</span></p>
  </div>
</div>
</body></html>
"""

SUBMISSION_PAGE = f"""
<html><body>
<div class="header">
  <a href="/course/1">Course</a>
  <a href="/dossier/student/321" title="{STUDENT_TITLE}"> Alice Example </a>
</div>
<textarea class="inputTextarea">def smaller(a, b):
    return a &lt; b</textarea>
<textarea class="inputTextarea">assert smaller(1, 2) &amp;&amp; True</textarea>
<div class="meta"><span>Last saved at</span><span>2023-04-01 12:00:00</span></div>
<script>var params = [{{"name":"student", "value":"321"}}];</script>
</body></html>
"""


@pytest.fixture
def submissions_page():
    return SUBMISSIONS_PAGE


@pytest.fixture
def submission_page():
    return SUBMISSION_PAGE
