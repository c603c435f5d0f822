"""
输入校验 - 把界面上的文本转换成模拟器需要的参数

所有校验在模拟开始前完成，任何一项不通过都不会运行模拟
"""


class InputError(ValueError):
    """输入校验失败，str(exc) 即展示给用户的提示"""


class EmptyReferenceError(InputError):
    def __init__(self):
        super().__init__("Please enter a reference string.")


class InvalidPageError(InputError):
    def __init__(self, token=None):
        super().__init__("Reference string must contain only numbers.")
        self.token = token


class InvalidFrameCountError(InputError):
    def __init__(self, value=None):
        super().__init__("Please enter a valid number of frames.")
        self.value = value


def parse_reference_string(text):
    """
    解析访问序列，如 "1 2 3 4 1 2 5"

    Raises:
        EmptyReferenceError: 序列为空或只有空白
        InvalidPageError: 含有非整数的项
    """
    tokens = (text or "").split()
    if not tokens:
        raise EmptyReferenceError()

    pages = []
    for token in tokens:
        try:
            pages.append(int(token))
        except ValueError:
            raise InvalidPageError(token) from None
    return pages


def parse_frame_count(value):
    """解析内存块数，必须是正整数"""
    if isinstance(value, bool):
        raise InvalidFrameCountError(value)
    if isinstance(value, int):
        frames = value
    else:
        try:
            frames = int(str(value).strip())
        except ValueError:
            raise InvalidFrameCountError(value) from None
    if frames <= 0:
        raise InvalidFrameCountError(value)
    return frames


def parse_simulation_input(reference_text, frame_value):
    # 先校验序列再校验块数
    pages = parse_reference_string(reference_text)
    frames = parse_frame_count(frame_value)
    return pages, frames
