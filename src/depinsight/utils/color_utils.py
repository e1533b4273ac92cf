# src/depinsight/utils/color_utils.py
"""
提供依賴圖節點配色的公用函式。
"""

# 1. 標準庫導入
import colorsys

# 2. 第三方庫導入
# (無)

# 3. 本專案導入
# (無)

GOLDEN_RATIO_CONJUGATE = 0.61803398875
FILL_LIGHTNESS = 0.85
FILL_SATURATION = 0.8


def _to_hex(red: float, green: float, blue: float) -> str:
    return "#" + "".join(f"{int(round(channel * 255)):02X}" for channel in (red, green, blue))


def _from_hex(hex_color: str) -> tuple[float, float, float]:
    value = hex_color.lstrip("#")
    return tuple(int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4))


def generate_color_palette(num_colors: int, start_hue: float = 0.7) -> list[str]:
    """
    以黃金比例步進色相，產生 num_colors 個淺色填充色。
    每個 group 取得一個顏色；相同的輸入永遠產生相同的調色盤。
    """
    palette = []
    hue = start_hue
    for _ in range(num_colors):
        hue = (hue + GOLDEN_RATIO_CONJUGATE) % 1
        palette.append(_to_hex(*colorsys.hls_to_rgb(hue, FILL_LIGHTNESS, FILL_SATURATION)))
    return palette


def get_analogous_dark_color(hex_color: str, darken: float = 0.3) -> str:
    """
    為填充色計算同色相的深色邊框色。

    Args:
        hex_color: "#RRGGBB" 形式的填充色。
        darken: 亮度的縮放比例，越小越深。
    """
    hue, lightness, saturation = colorsys.rgb_to_hls(*_from_hex(hex_color))
    return _to_hex(*colorsys.hls_to_rgb(hue, max(0.1, lightness * darken), min(1.0, saturation * 1.2)))
