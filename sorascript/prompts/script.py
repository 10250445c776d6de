"""Script generation and polish prompts"""

# Section headers the model is asked to emit; the parser splits on these literals
OVERALL_HEADER = "**总体分析**"
SHOTS_HEADER = "**镜头分析**"
MUSIC_HEADER = "**背景音乐分析**"
SECTION_HEADERS = (OVERALL_HEADER, SHOTS_HEADER, MUSIC_HEADER)

SCRIPT_PROMPT_INTRO = """你是一位世界级的电商视频广告编剧大师和Sora视频提示词专家。

**任务目标：**
请根据我提供的【产品图片】"""

SCRIPT_MODE_REQUIREMENTS = """和【参考脚本】，创作一个新的视频拍摄脚本/提示词。

**核心要求（必须严格遵守）：**
1.  **复刻程度：** 新脚本必须保持参考脚本 90% 的一致性。这意味着镜头语言、运镜方式、光影氛围、剪辑节奏、背景音乐风格必须与参考脚本高度相似，仅仅将参考脚本中的核心物体完美替换为图片中的【我的产品】。
**参考脚本内容：**
"""

VIDEO_MODE_REQUIREMENTS = """和【参考视频】，创作一个新的视频拍摄脚本/提示词。

**核心要求（必须严格遵守）：**
1.  **视频复刻：** 请深入分析【参考视频】的运镜手法、剪辑节奏、场景氛围和光影效果。保持参考视频 90% 的风格一致性，但必须将视频中的【原始主体物品】完美替换为我的【产品图片】中的商品。
"""

OUTPUT_FORMAT_TEMPLATE = """
2.  **时长适配：** 请严格按照我要求的时长【{duration}】来规划镜头数量和节奏。
3.  **格式要求：** 输出格式必须严格遵循以下Markdown结构，不要包含Markdown代码块标记（如 ```markdown），直接输出内容：

---
{overall_header}
*   **核心主题：** ...
*   **角色：** ...
*   **场景：** ...
*   **物品：** [基于图片详细描述产品外观]
*   **一致性：** ...
*   **画面风格/氛围/色调/光影/情绪：** ...
*   **背景音乐：** ...

---
{shots_header}
[请根据 {duration} 的时长拆分时间轴，例如 00:00-00:02]

**00:00-00:XX**
*   **画面风格/氛围/色调/光影/情绪：** ...
*   **故事内容细节：** [详细描述画面，将主体替换为我的产品，保留原参考内容的动作和运镜]
*   **台词对话：** ...
*   **音效信息：** ...
*   **人物外貌特征/行为动作/表情：** ...
*   **镜头语言：** ...

(依次类推...)
---
{music_header}
...
"""

POLISH_PROMPT_TEMPLATE = """你是一位资深的电商营销文案专家。请对下面的视频脚本进行【润色】。

**润色要求：**
1. **痛点直击：** 让台词更具穿透力，更能直击消费者痛点。
2. **画面感：** 优化"故事内容细节"的描述，使其更适合AI视频生成模型（如Sora）理解，增加细节描述词（材质、光泽、动态）。
3. **转化率：** 在结尾部分增强号召力（Call to Action）。
4. **保持结构：** 保持原有的Markdown结构不变，只修改内容。

**待润色脚本：**
"""

# Built-in "smart home / 3C" template used by script mode out of the box
DEFAULT_REFERENCE_SCRIPT = """---
**总体分析**
*   **核心主题：** 一款智能家居产品如何让忙碌的都市生活变得轻松有序。
*   **角色：** 25-30岁都市白领，女性，干练短发，穿米白色针织衫。
*   **场景：** 现代简约风格公寓客厅，落地窗，清晨自然光。
*   **物品：** 智能音箱，哑光白色机身，顶部环形呼吸灯。
*   **一致性：** 产品外观、角色服装与发型全片保持一致。
*   **画面风格/氛围/色调/光影/情绪：** 明亮通透，暖白色调，柔和侧逆光，轻松愉悦。
*   **背景音乐：** 轻快的电子流行乐，节奏明快。

---
**镜头分析**

**00:00-00:02**
*   **画面风格/氛围/色调/光影/情绪：** 清晨暖光，略带慵懒。
*   **故事内容细节：** 特写，闹钟响起，角色伸手摸索却打翻水杯，表情懊恼。
*   **台词对话：** 无
*   **音效信息：** 闹钟铃声，水杯倒下的声音。
*   **人物外貌特征/行为动作/表情：** 睡眼惺忪，皱眉。
*   **镜头语言：** 俯拍特写，轻微手持晃动。

**00:02-00:05**
*   **画面风格/氛围/色调/光影/情绪：** 光线变亮，节奏加快。
*   **故事内容细节：** 角色对产品说出指令，窗帘自动拉开，阳光洒满房间，产品呼吸灯亮起。
*   **台词对话：** "早上好，打开窗帘。"
*   **音效信息：** 窗帘电机声，清脆的提示音。
*   **人物外貌特征/行为动作/表情：** 坐起身，舒展双臂，微笑。
*   **镜头语言：** 中景推镜，由角色推向产品。

**00:05-00:10**
*   **画面风格/氛围/色调/光影/情绪：** 明快干净，产品质感突出。
*   **故事内容细节：** 产品360度旋转展示，哑光机身反射柔和光泽，字幕弹出核心卖点。
*   **台词对话：** "一句话，唤醒整个家。"
*   **音效信息：** 音乐鼓点加强。
*   **人物外貌特征/行为动作/表情：** 无
*   **镜头语言：** 环绕运镜，浅景深。

**00:10-00:15**
*   **画面风格/氛围/色调/光影/情绪：** 温暖满足，收尾有力。
*   **故事内容细节：** 角色端着咖啡坐在窗边，产品在桌面上，画面定格，出现品牌标识与购买引导。
*   **台词对话：** "现在下单，立享限时优惠！"
*   **音效信息：** 音乐收尾，轻快的结束音。
*   **人物外貌特征/行为动作/表情：** 放松微笑，看向镜头。
*   **镜头语言：** 固定中景，缓慢拉远。

---
**背景音乐分析**
轻快的电子流行乐，BPM约110，开头以闹钟音效切入，第2秒鼓点进入推动节奏，产品展示段落加入合成器主旋律，结尾随品牌定格自然收束。
"""


def build_generation_prompt(reference_type: str, duration: str, reference_script: str = "") -> str:
    """
    Build the script generation instruction

    Args:
        reference_type: "script" to replicate reference_script, "video" to replicate the attached video
        duration: Target duration label, substituted verbatim (e.g. "15s")
        reference_script: Reference script text, interpolated in script mode only

    Returns:
        Complete instruction text
    """
    if reference_type == "video":
        prompt = SCRIPT_PROMPT_INTRO + VIDEO_MODE_REQUIREMENTS
    else:
        prompt = SCRIPT_PROMPT_INTRO + SCRIPT_MODE_REQUIREMENTS + reference_script + "\n"

    prompt += OUTPUT_FORMAT_TEMPLATE.format(
        duration=duration,
        overall_header=OVERALL_HEADER,
        shots_header=SHOTS_HEADER,
        music_header=MUSIC_HEADER
    )
    return prompt


def build_polish_prompt(current_script: str) -> str:
    """Wrap a generated script in the polish (rewrite) instruction"""
    return POLISH_PROMPT_TEMPLATE + current_script + "\n"
