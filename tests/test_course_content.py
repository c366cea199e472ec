import pytest
from pydantic import ValidationError

from academy.models.catalog.course_model import CourseType
from academy.schemas.catalog.course_schema import (
    ArticleContent,
    PdfContent,
    VideoContent,
    dump_course_content,
    parse_course_content,
)
from academy.schemas.catalog.question_schema import QuestionIn


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=8ca4qNI4qYI",
        "https://youtu.be/8ca4qNI4qYI",
        "https://www.youtube.com/embed/8ca4qNI4qYI",
        "https://www.youtube.com/shorts/8ca4qNI4qYI",
    ],
)
def test_youtube_id_is_extracted(url):
    assert VideoContent(url=url).youtube_video_id == "8ca4qNI4qYI"


def test_non_youtube_url_has_no_video_id():
    assert VideoContent(url="https://example.com/video.mp4").youtube_video_id is None


def test_stored_content_is_parsed_by_course_type():
    assert isinstance(parse_course_content(CourseType.ARTICLE, {"body": "Texte"}), ArticleContent)
    assert isinstance(parse_course_content("PDF", {"url": "doc.pdf"}), PdfContent)
    with pytest.raises(ValidationError):
        parse_course_content(CourseType.VIDEO, {"body": "pas une url"})


def test_dump_drops_the_discriminator():
    assert dump_course_content(PdfContent(url="doc.pdf")) == {"url": "doc.pdf"}


def test_question_answer_index_must_exist():
    with pytest.raises(ValidationError):
        QuestionIn(text="?", options=["a", "b"], correct_answer_index=2)
    with pytest.raises(ValidationError):
        QuestionIn(text="?", options=[], correct_answer_index=0)
