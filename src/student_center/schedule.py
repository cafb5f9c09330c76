"""Class schedule parsing for the PeopleSoft "My Class Schedule" page."""

import logging
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from .exceptions import ScheduleParseError
from .forms import FormFields, collect_form_fields
from .selectors import FORM_FIELDS, SELECTORS
from .transport import SessionTransport

logger = logging.getLogger(__name__)


@dataclass
class Meeting:
    """One meeting pattern of a class component."""

    days_times: str = ""
    room: str = ""
    instructor: str = ""
    dates: str = ""


@dataclass
class Component:
    """A class section the student is enrolled in (lecture, lab, ...)."""

    class_number: str
    section: str
    component: str
    meetings: list[Meeting] = field(default_factory=list)
    # PeopleSoft action that opens the section's detail page
    section_action: str = ""

    # Filled in by fetch_extra_schedule_info()
    description: str = ""
    capacity: int | None = None
    enrolled: int | None = None
    available: int | None = None
    waitlist: int | None = None


@dataclass
class Course:
    """An enrolled course with its components."""

    code: str
    title: str
    status: str = ""
    units: str = ""
    grading: str = ""
    components: list[Component] = field(default_factory=list)


def _text(node: Tag, selector: str) -> str:
    element = node.select_one(selector)
    if element is None:
        return ""
    return element.get_text(" ", strip=True)


def _int_or_none(value: str) -> int | None:
    try:
        return int(value.replace(",", ""))
    except ValueError:
        return None


def _parse_components(block: Tag) -> list[Component]:
    components: list[Component] = []
    for row in block.select(SELECTORS["component_row"]):
        if row.select_one(SELECTORS["schedule"]) is None:
            continue  # header row

        meeting = Meeting(
            days_times=_text(row, SELECTORS["schedule"]),
            room=_text(row, SELECTORS["room"]),
            instructor=_text(row, SELECTORS["instructor"]),
            dates=_text(row, SELECTORS["dates"]),
        )
        class_number = _text(row, SELECTORS["class_number"])
        if not class_number and components:
            # Extra meeting pattern of the previous component
            components[-1].meetings.append(meeting)
            continue

        link = row.select_one(SELECTORS["section_link"])
        components.append(
            Component(
                class_number=class_number,
                section=_text(row, SELECTORS["section"]),
                component=_text(row, SELECTORS["component"]),
                meetings=[meeting],
                section_action=link.get("id", "") if link else "",
            )
        )
    return components


def parse_schedule(soup: BeautifulSoup) -> list[Course]:
    """Parse the list view of the class schedule.

    Args:
        soup: Parsed schedule page

    Returns:
        List of courses, empty if the student has no classes

    Raises:
        ScheduleParseError: If the page is not the class schedule
    """
    blocks = soup.select(SELECTORS["course_block"])
    if not blocks:
        if soup.select_one(SELECTORS["schedule_title"]) is not None:
            return []
        raise ScheduleParseError("Page is not a class schedule")

    courses = []
    for block in blocks:
        heading = _text(block, SELECTORS["course_title"])
        if not heading:
            raise ScheduleParseError("Course block without a title")
        code, _, title = heading.partition(" - ")
        courses.append(
            Course(
                code=code.strip(),
                title=title.strip(),
                status=_text(block, SELECTORS["course_status"]),
                units=_text(block, SELECTORS["course_units"]),
                grading=_text(block, SELECTORS["course_grading"]),
                components=_parse_components(block),
            )
        )
    return courses


def _page_fields(soup: BeautifulSoup) -> FormFields:
    form = soup.select_one(SELECTORS["main_form"]) or soup.find("form")
    if form is None:
        raise ScheduleParseError("No PeopleSoft form on page")
    return collect_form_fields(form)


def _apply_class_detail(component: Component, soup: BeautifulSoup) -> None:
    keys = ("detail_description", "detail_capacity", "detail_enrolled", "detail_available")
    if all(soup.select_one(SELECTORS[key]) is None for key in keys):
        raise ScheduleParseError(f"Unexpected class detail page for class {component.class_number}")

    component.description = _text(soup, SELECTORS["detail_description"])
    component.capacity = _int_or_none(_text(soup, SELECTORS["detail_capacity"]))
    component.enrolled = _int_or_none(_text(soup, SELECTORS["detail_enrolled"]))
    component.available = _int_or_none(_text(soup, SELECTORS["detail_available"]))
    component.waitlist = _int_or_none(_text(soup, SELECTORS["detail_waitlist"]))


def fetch_extra_schedule_info(
    transport: SessionTransport, page_url: str, courses: list[Course], soup: BeautifulSoup
) -> None:
    """Open every component's class detail page and copy its details over.

    PeopleSoft pages are stateful: each detail page is opened by posting the
    list page's form with the section link as the action, then closed again
    so the next post starts from the list. The caller must hold the session
    (Client.shared_session()) for the whole pass.

    Args:
        transport: Session transport, session held in shared mode
        page_url: Absolute URL of the schedule list view
        courses: Courses to enrich in place
        soup: Parsed schedule list page the courses came from

    Raises:
        RedirectError: If the session expired during the pass
        ScheduleParseError: If a detail page has unexpected content
    """
    action_field = FORM_FIELDS["action"]
    fields = _page_fields(soup)

    for course in courses:
        for component in course.components:
            if not component.section_action:
                continue
            logger.debug("Fetching class detail for %s %s", course.code, component.section)

            response = transport.post_form(page_url, {**fields, action_field: component.section_action})
            detail = BeautifulSoup(response.text, "lxml")
            _apply_class_detail(component, detail)

            close = {**_page_fields(detail), action_field: FORM_FIELDS["detail_close_action"]}
            response = transport.post_form(page_url, close)
            fields = _page_fields(BeautifulSoup(response.text, "lxml"))
