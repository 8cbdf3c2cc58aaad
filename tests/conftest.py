from __future__ import annotations

import pytest

from tutor_app.core.models import Question


@pytest.fixture
def three_questions() -> list[Question]:
    return [
        Question(text="Who wrote 'The Portrait of a Lady'?", options=("Khushwant Singh", "R.K. Narayan"), correct_index=0),
        Question(text="Synonym of 'brisk'?", options=("slow", "quick", "dull"), correct_index=1),
        Question(text="Plural of 'child'?", options=("childs", "children"), correct_index=1, explanation="Irregular plural."),
    ]
