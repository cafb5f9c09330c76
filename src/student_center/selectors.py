"""Centralized CSS selectors, field names and paths for Student Center pages.

Defaults target PeopleSoft Campus Solutions 9.x ("My Class Schedule",
SSR_SSENRL_LIST). Numbered PeopleSoft element ids end in ``$N`` where N is the
row index.
"""

# Paths relative to the engine root URL
URL_PATTERNS = {
    "schedule_list_view": "/EMPLOYEE/HRMS/c/SA_LEARNER_SERVICES.SSR_SSENRL_LIST.GBL?Page=SSR_SSENRL_LIST",
}

# Form fields posted to PeopleSoft components
FORM_FIELDS = {
    # Selects "all" in the list view's display options
    "schedule_select_all": ("SSR_DUMMY_RECV1$sels$0", "0"),
    "action": "ICAction",
    "detail_close_action": "CLASS_SRCH_WRK2_SSR_PB_CLOSE",
}

SELECTORS = {
    # Page structure
    "main_form": "form[name='win0']",
    "schedule_title": "#DERIVED_REGFRM1_SS_TRANSACT_TITLE",
    "course_block": "div[id^='win0divDERIVED_REGFRM1_DESCR20$']",
    "course_title": "td.PAGROUPDIVIDER",
    # Course rows (prefixes of numbered ids)
    "course_status": "[id^='STATUS$']",
    "course_units": "[id^='DERIVED_REGFRM1_UNT_TAKEN$']",
    "course_grading": "[id^='GB_DESCR$']",
    "component_row": "table[id^='CLASS_MTG_VW$scroll$'] tr",
    # Component columns
    "class_number": "[id^='DERIVED_CLS_DTL_CLASS_NBR$']",
    "section": "[id^='MTG_SECTION$']",
    "section_link": "a[id^='MTG_SECTION$']",
    "component": "[id^='MTG_COMP$']",
    "schedule": "[id^='MTG_SCHED$']",
    "room": "[id^='MTG_LOC$']",
    "instructor": "[id^='DERIVED_CLS_DTL_SSR_INSTR_LONG$']",
    "dates": "[id^='MTG_DATES$']",
    # Class detail page
    "detail_description": "#DERIVED_CLSRCH_DESCRLONG",
    "detail_capacity": "#SSR_CLS_DTL_WRK_ENRL_CAP",
    "detail_enrolled": "#SSR_CLS_DTL_WRK_ENRL_TOT",
    "detail_available": "#SSR_CLS_DTL_WRK_AVAILABLE_SEATS",
    "detail_waitlist": "#SSR_CLS_DTL_WRK_WAIT_TOT",
}
