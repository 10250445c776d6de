import pytest

from sorascript.core.workflow import create_app_state, set_product_image, set_reference_video


SAMPLE_SCRIPT = """---
**总体分析**
*   **核心主题：** 保温杯陪伴通勤的一天
*   **物品：** 磨砂黑保温杯

---
**镜头分析**

**00:00-00:03**
*   **故事内容细节：** 特写，杯盖旋开，热气升起
*   **台词对话：** "早上七点：刚刚好的温度"

**00:03-00:15**
*   **镜头语言：** 环绕运镜

---
**背景音乐分析**
轻快的 Lo-fi 节拍
"""


class FakeLLM:
    """Records invoke() calls and returns a canned reply"""

    def __init__(self, reply=SAMPLE_SCRIPT, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def invoke(self, prompt, **kwargs):
        self.calls.append({"prompt": prompt, **kwargs})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def sample_script():
    return SAMPLE_SCRIPT


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def make_llm():
    return FakeLLM


@pytest.fixture
def failing_llm():
    return FakeLLM(error=RuntimeError("quota exceeded"))


@pytest.fixture
def image():
    data = b"\x89PNG\r\n\x1a\nfake-image"
    return {"filename": "cup.png", "media_type": "image/png", "data": data, "size": len(data)}


@pytest.fixture
def video():
    data = b"\x00\x00\x00\x18ftypmp42fake-video"
    return {"filename": "ref.mp4", "media_type": "video/mp4", "data": data, "size": len(data)}


@pytest.fixture
def ready_state(image):
    return set_product_image(create_app_state("session-1"), image)


@pytest.fixture
def ready_video_state(ready_state, video):
    return set_reference_video(ready_state, video)
