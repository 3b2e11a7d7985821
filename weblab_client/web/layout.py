"""
Page layout contract for the WebLab submission pages.

The parsers below walk WebLab's HTML by fixed positions, CSS classes and
regexes. Every positional lookup is checked, so a change in the markup
surfaces as a ``PageLayoutError`` naming the missing piece. Bump
``LAYOUT_VERSION`` whenever the contract is adjusted to new markup.
"""

import html
import logging
import re
from datetime import datetime

from bs4 import BeautifulSoup, Tag

from weblab_client.exceptions import PageLayoutError
from weblab_client.models.records import (
    Student,
    StudentVerbose,
    Submission,
    SubmissionInfo,
)
from weblab_client.utils.dates import is_unknown, parse_timestamp

log = logging.getLogger(__name__)

LAYOUT_VERSION = 2

# Submissions list: the rows live in the second <tbody> on the page.
SUBMISSIONS_TBODY_INDEX = 1
ROW_MIN_CELLS = 6
CELL_STUDENT = 0
CELL_LINK = 1
CELL_STARTED = 2
CELL_COMPLETED = 3
CELL_GRADE = 4
CELL_PASSED = 5

# Children of the student cell.
STUDENT_NAME_CHILD = 1
STUDENT_EMAIL_CHILD = 2
STUDENT_ENROLLMENT_CHILD = 3
NOT_ENROLLED_TEXT = "not enrolled for grade"

SPEC_TESTS_CHILD = 2
SUCCESS_CLASS = "text-success"
STATUS_ID_PREFIX = "status-"
# Path from the element whose id is the submission GUID to the "saved ... before" text.
LAST_SAVED_PATH = (0, 1, 0)

# Single submission page.
CODE_AREA_CLASS = "inputTextarea"
STUDENT_LINK_MARKER = "dossier"
LAST_SAVED_LABEL = "Last saved at"

_IDS_REGEX = re.compile(r"netid:(\w+) studnr:(\w+)\. Opens in new window")
_SUBMISSION_URL_REGEX = re.compile(r"/submission/([^/]+)/view")
_PLATFORM_ID_REGEX = re.compile(r'\{"name":"student", "value":"([^"]+)"\}')
_GRADE_REGEX = re.compile(r"-?\d+\.\d+")
_NUMBER_REGEX = re.compile(r"\d+")
_SAVED_REGEX = re.compile(r"saved\s+(?P<date>.+?)\s+before", re.IGNORECASE | re.DOTALL)


def _soup(source: str) -> BeautifulSoup:
    return BeautifulSoup(source, "html.parser")


def _children(element: Tag) -> list[Tag]:
    """The element children of ``element``, skipping text nodes."""
    return element.find_all(True, recursive=False)


def _child(element: Tag, index: int, what: str) -> Tag:
    children = _children(element)
    if index >= len(children):
        raise PageLayoutError(
            f"Expected {what} at child {index} of <{element.name}>, "
            f"found only {len(children)} children"
        )
    return children[index]


def _attribute(element: Tag, name: str, what: str) -> str:
    value = element.get(name)
    if value is None:
        raise PageLayoutError(f"Expected a '{name}' attribute on {what}")
    return value


def _has_success_child(cell: Tag) -> bool:
    return any(SUCCESS_CLASS in child.get("class", []) for child in _children(cell))


def extract_ids(element: Tag) -> tuple[str, str]:
    """
    Reads the net-id and student number from an element's title attribute.

    Returns:
        A ``(netid, student_number)`` tuple.
    """
    title = _attribute(element, "title", "the student element")
    match = _IDS_REGEX.search(title)
    if not match:
        raise PageLayoutError(f"Student title did not match the id pattern: {title!r}")
    return match.group(1).strip(), match.group(2).strip()


def _parse_grade(cell: Tag) -> float:
    children = _children(cell)
    if not children:
        return 0.0

    text = children[0].get_text()
    if not text.strip():
        text = cell.get_text()

    match = _GRADE_REGEX.search(text)
    if not match:
        raise PageLayoutError(f"Grade cell did not contain a decimal grade: {text!r}")
    return float(match.group(0))


def _parse_spec_tests(cell: Tag) -> int:
    if len(_children(cell)) < SPEC_TESTS_CHILD + 1:
        return 0
    holder = _child(cell, SPEC_TESTS_CHILD, "the spec test summary")
    text = _child(holder, 0, "the spec test count").get_text()
    match = _NUMBER_REGEX.search(text)
    return int(match.group(0)) if match else 0


def _parse_student(cell: Tag, url: str) -> StudentVerbose:
    name_element = _child(cell, STUDENT_NAME_CHILD, "the student name")
    netid, student_number = extract_ids(name_element)
    email_holder = _child(cell, STUDENT_EMAIL_CHILD, "the student email")
    email = _child(email_holder, 0, "the student email").decode_contents().strip()

    children = _children(cell)
    enrolled = (
        len(children) <= STUDENT_ENROLLMENT_CHILD
        or children[STUDENT_ENROLLMENT_CHILD].decode_contents() != NOT_ENROLLED_TEXT
    )

    match = _SUBMISSION_URL_REGEX.search(url)
    if not match:
        raise PageLayoutError(f"Submission link did not contain a platform id: {url!r}")

    return StudentVerbose(
        name=name_element.get_text().strip(),
        netid=netid,
        student_number=student_number,
        platform_id=match.group(1).strip(),
        email=email,
        enrolled_for_grade=enrolled,
    )


def _find_guid(row: Tag) -> str | None:
    status = row.find(id=re.compile(f"^{STATUS_ID_PREFIX}"))
    if status is None:
        return None
    return status["id"][len(STATUS_ID_PREFIX) :] or None


def _find_last_saved(document: BeautifulSoup, guid: str) -> datetime | None:
    """Best-effort lookup of the 'saved ... before' date for a submission GUID."""
    target = document.find(id=guid)
    if target is None:
        return None
    try:
        node = target
        for index in LAST_SAVED_PATH:
            node = _child(node, index, "the last saved text")
    except PageLayoutError as e:
        log.debug(f"No last saved date for submission {guid}: {e}")
        return None

    match = _SAVED_REGEX.search(node.get_text())
    if not match:
        return None
    saved = parse_timestamp(match.group("date").strip())
    return None if is_unknown(saved) else saved


def _parse_row(row: Tag, document: BeautifulSoup, assignment_id: str) -> SubmissionInfo:
    cells = _children(row)
    if len(cells) < ROW_MIN_CELLS:
        raise PageLayoutError(
            f"Expected at least {ROW_MIN_CELLS} cells per submission row, "
            f"found {len(cells)}"
        )

    link = _child(cells[CELL_LINK], 0, "the submission link")
    url = _attribute(link, "href", "the submission link")
    started = _has_success_child(cells[CELL_STARTED])

    guid = None
    last_saved = None
    if started:
        guid = _find_guid(row)
        if guid:
            last_saved = _find_last_saved(document, guid)

    return SubmissionInfo(
        student=_parse_student(cells[CELL_STUDENT], url),
        assignment_id=str(assignment_id),
        url=url,
        started=started,
        spec_tests=_parse_spec_tests(cells[CELL_STARTED]),
        completed=_has_success_child(cells[CELL_COMPLETED]),
        grade=_parse_grade(cells[CELL_GRADE]),
        passed=_has_success_child(cells[CELL_PASSED]),
        guid=guid,
        last_saved=last_saved,
    )


def parse_submissions(source: str, assignment_id: str | int) -> list[SubmissionInfo]:
    """
    Parses an assignment's submissions list page.

    Args:
        source: The page HTML.
        assignment_id: The assignment the page belongs to.

    Returns:
        One ``SubmissionInfo`` per table row.

    Raises:
        PageLayoutError: If the page does not match the expected layout.
    """
    document = _soup(source)
    bodies = document.find_all("tbody")
    if len(bodies) <= SUBMISSIONS_TBODY_INDEX:
        raise PageLayoutError(
            f"Expected at least {SUBMISSIONS_TBODY_INDEX + 1} <tbody> elements, "
            f"found {len(bodies)}"
        )

    rows = [
        child
        for child in _children(bodies[SUBMISSIONS_TBODY_INDEX])
        if child.name == "tr"
    ]
    submissions = [_parse_row(row, document, str(assignment_id)) for row in rows]
    log.debug(f"Parsed {len(submissions)} submissions for assignment {assignment_id}")
    return submissions


def _parse_last_saved_label(document: BeautifulSoup) -> datetime | None:
    label = document.find(
        lambda tag: tag.string is not None
        and tag.string.strip().startswith(LAST_SAVED_LABEL)
    )
    if label is None:
        raise PageLayoutError(f"Could not find the '{LAST_SAVED_LABEL}' label")

    sibling = label.find_next_sibling()
    text = sibling.get_text() if sibling is not None else ""
    if not text.strip():
        # Date written in the label itself, e.g. "Last saved at: 2023-04-01 12:00".
        text = label.string.strip()[len(LAST_SAVED_LABEL) :].lstrip(" :")

    saved = parse_timestamp(text.strip())
    return None if is_unknown(saved) else saved


def parse_submission(source: str) -> Submission:
    """
    Parses a single submission page.

    Returns:
        The student's solution and test code with the student identity.

    Raises:
        PageLayoutError: If the page does not match the expected layout.
    """
    document = _soup(source)

    areas = document.find_all(class_=CODE_AREA_CLASS)
    if len(areas) < 2:
        raise PageLayoutError(
            f"Expected two '{CODE_AREA_CLASS}' code areas, found {len(areas)}"
        )
    solution = html.unescape(areas[0].decode_contents())
    test = html.unescape(areas[1].decode_contents())

    student_link = document.find(
        lambda tag: STUDENT_LINK_MARKER in (tag.get("href") or "")
    )
    if student_link is None:
        raise PageLayoutError("Could not find the student dossier link")

    match = _PLATFORM_ID_REGEX.search(source)
    if not match:
        raise PageLayoutError("Could not find the student platform id")

    netid, student_number = extract_ids(student_link)
    student = Student(
        name=student_link.get_text().strip(),
        netid=netid,
        student_number=student_number,
        platform_id=match.group(1).strip(),
    )
    return Submission(
        student=student,
        solution=solution,
        test=test,
        last_saved=_parse_last_saved_label(document),
    )
