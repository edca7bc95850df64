import pytest

SAMPLE_CHAT = "\n".join(
    [
        "[12/01/2024, 09:15:02] Alice: are you coming tonight?",
        "[12/01/2024, 09:16:40] Bob: yes, see you at eight",
        "\u200e[12/01/2024, 09:17:00] Alice: \u200eimage omitted",
        "[12/01/2024, 09:18:11] Alice: great! bring snacks",
        "[12/01/2024, 09:19:30] Bob: sure, chips and salsa",
        "",
        "[12/01/2024, 09:21:02] Alice: are you bringing Carol?",
        "[12/01/2024, 09:22:45] Bob: yes, Carol is coming",
        "[12/01/2024, 09:23:10] Bob: see you tonight",
        "[13/01/2024, 10:02:00] Alice: thanks for coming!",
        "[13/01/2024, 10:05:31] Bob: thanks, great night",
    ]
)


@pytest.fixture
def chat_file(tmp_path):
    path = tmp_path / "chat.txt"
    path.write_text(SAMPLE_CHAT + "\n", encoding="utf-8")
    return path
