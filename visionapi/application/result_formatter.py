"""
Analysis result formatter - builds report sections, renders text last
"""
from typing import Iterable, List, Optional

from visionapi.domain.geometry import to_display_rect
from visionapi.domain.models import (
    AnalysisResult,
    Category,
    ColorInfo,
    FaceDescription,
    ImageDescription,
    ImageType,
    OperationStatus,
    ReportSection,
    Tag,
    TextLineReport,
    TextOperationResult,
)

NONE_TOKEN = "None"
SUB_INDENT = "    "

CLIP_ART_LABELS = {
    0: "Non-Clipart",
    1: "Ambiguous",
    2: "Normal",
    3: "Good",
}


def clip_art_label(code) -> str:
    """Label for a clip-art code; unknown codes fall back to Non-Clipart"""
    return CLIP_ART_LABELS.get(code, CLIP_ART_LABELS[0])


def line_drawing_label(code) -> str:
    return "LineDrawing" if code == 1 else "Non-LineDrawing"


def join_values(values: Iterable) -> str:
    return ", ".join(str(v) for v in values)


def _sub_list(label: str, names: Optional[List[str]]) -> str:
    if not names:
        return f"{SUB_INDENT}{label}: {NONE_TOKEN}"
    return f"{SUB_INDENT}{label}: {join_values(names)}"


def _image_type_section(image_type: ImageType) -> ReportSection:
    return ReportSection("Image Type", [
        f"Clip Art Type: {clip_art_label(image_type.clip_art_type)}",
        f"Line Drawing Type: {line_drawing_label(image_type.line_drawing_type)}",
    ])


def _color_section(color: ColorInfo) -> ReportSection:
    return ReportSection("Color", [
        f"Dominant Foreground: {color.dominant_foreground or NONE_TOKEN}",
        f"Dominant Background: {color.dominant_background or NONE_TOKEN}",
        f"Dominant Colors: {join_values(color.dominant_colors) or NONE_TOKEN}",
        f"Accent Color: {color.accent_color or NONE_TOKEN}",
        f"Black & White: {'Yes' if color.is_bw else 'No'}",
    ])


def _categories_section(categories: List[Category]) -> ReportSection:
    lines = []
    for category in categories:
        lines.append(f"{category.name} ({category.score:.2f})")
        celebrities = [c.name for c in category.celebrities or []]
        landmarks = [lm.name for lm in category.landmarks or []]
        lines.append(_sub_list("Celebrities", celebrities))
        lines.append(_sub_list("Landmarks", landmarks))
    return ReportSection("Categories", lines or [NONE_TOKEN])


def _description_section(description: ImageDescription) -> ReportSection:
    captions = [c.text for c in description.captions]
    return ReportSection("Description", [
        f"Captions: {join_values(captions) or NONE_TOKEN}",
        f"Tags: {join_values(description.tags) or NONE_TOKEN}",
    ])


def _tags_section(tags: List[Tag]) -> ReportSection:
    return ReportSection("Tags", [join_values(t.name for t in tags) or NONE_TOKEN])


def _faces_section(faces: List[FaceDescription]) -> ReportSection:
    lines = []
    for face in faces:
        r = face.region
        who = " ".join(str(v) for v in (face.gender, face.age) if v is not None) or "Face"
        lines.append(f"{who} at ({r.left}, {r.top}, {r.width}, {r.height})")
    return ReportSection("Faces", lines or [NONE_TOKEN])


def format_analysis(result: AnalysisResult) -> List[ReportSection]:
    """Sections for every facet present, in a fixed order"""
    sections = []
    if result.image_type is not None:
        sections.append(_image_type_section(result.image_type))
    if result.color is not None:
        sections.append(_color_section(result.color))
    if result.categories is not None:
        sections.append(_categories_section(result.categories))
    if result.description is not None:
        sections.append(_description_section(result.description))
    if result.tags is not None:
        sections.append(_tags_section(result.tags))
    if result.faces is not None:
        sections.append(_faces_section(result.faces))
    return sections


def format_text_lines(result: TextOperationResult, scale: float) -> List[TextLineReport]:
    """Recognized lines in service order with their display rectangles"""
    return [
        TextLineReport(text=line.text, rect=to_display_rect(line.region, scale))
        for line in result.lines
    ]


def format_text_result(result: TextOperationResult) -> List[ReportSection]:
    if result.status == OperationStatus.SUCCEEDED:
        return [ReportSection("Text", [line.text for line in result.lines] or [NONE_TOKEN])]
    if result.status == OperationStatus.FAILED:
        reason = result.failure_reason or "unknown reason"
        return [ReportSection("Text", [f"Text recognition failed: {reason}"])]
    return [ReportSection("Text", [
        f"Text recognition did not complete (last status: {result.status.value})",
    ])]


def render_report(sections: List[ReportSection]) -> str:
    """Plain-text rendering of report sections"""
    blocks = []
    for section in sections:
        body = "\n".join(f"  {line}" for line in section.lines)
        blocks.append(f"{section.title}:\n{body}" if body else f"{section.title}:")
    return "\n\n".join(blocks)
