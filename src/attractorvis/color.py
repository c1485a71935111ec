def hsv_to_rgba(hue, saturation, value=1.0, alpha=1.0):
    """
    Convert hue (degrees), saturation and value (0-1) to an (r, g, b, a)
    tuple of floats in the 0-1 range.
    """
    h = hue % 360
    c = value * saturation
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = value - c

    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return (r + m, g + m, b + m, alpha)


def to_bgr(rgba):
    """8-bit BGR tuple for OpenCV drawing calls (alpha is dropped)."""
    r, g, b = rgba[:3]
    return (int(round(b * 255)), int(round(g * 255)), int(round(r * 255)))
