"""Prompt strings sent to the vision models."""

from .core import Language, Provider

GEMINI_PROMPT_EN = (
    "Analyze this image and provide a short, descriptive filename in lowercase "
    "with underscores. Return only the filename, nothing else. "
    "For example: cat_on_windowsill_sunny_day"
)

GEMINI_PROMPT_ZH = (
    "分析这张图片，给出一个简短的中文描述性文件名，词语之间用下划线连接。"
    "只返回文件名，不要返回其他内容。例如：窗台上的猫_阳光明媚"
)

GLM_PROMPT_EN = (
    "Describe this image as a short filename: lowercase English words joined "
    "by underscores, no file extension, no explanation. "
    "For example: cat_on_windowsill_sunny_day"
)

GLM_PROMPT_ZH = (
    "请用简短的中文为这张图片生成一个描述性文件名，词语之间用下划线连接，"
    "不要包含扩展名，也不要解释。例如：窗台上的猫_阳光明媚"
)

PROMPTS = {
    (Provider.GEMINI, Language.EN): GEMINI_PROMPT_EN,
    (Provider.GEMINI, Language.ZH): GEMINI_PROMPT_ZH,
    (Provider.GLM, Language.EN): GLM_PROMPT_EN,
    (Provider.GLM, Language.ZH): GLM_PROMPT_ZH,
}


def build_prompt(provider: Provider, language: Language) -> str:
    return PROMPTS[(provider, language)]
