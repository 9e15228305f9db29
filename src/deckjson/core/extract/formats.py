"""DrawingML readers shared by all extractors.

Everything here reads the underlying XML instead of python-pptx's format
proxies, because several of those proxies (``LineFormat.fill``,
``Font.color``, ``Run.font``) add elements to the document when read.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml import parse_xml
from pptx.oxml.ns import qn

_A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"

# schemeClr values that alias the theme's dk/lt slots
_SCHEME_ALIASES: Dict[str, str] = {
    "tx1": "dk1",
    "bg1": "lt1",
    "tx2": "dk2",
    "bg2": "lt2",
}

_COLOR_TAGS = ("a:srgbClr", "a:schemeClr", "a:sysClr", "a:prstClr", "a:scrgbClr", "a:hslClr")


def slugify_ascii(name: str) -> str:
    s = name.strip()
    s = re.sub(r"\s+", "_", s)
    s = re.sub(r"[^a-zA-Z0-9_\-]", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")
    if not s:
        s = "document"
    return s[:64]


def norm_text(s: str) -> str:
    s = s.replace("\u00a0", " ").replace("\x0b", "\n")
    s = re.sub(r"[ \t]+", " ", s)
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()


def emu(v: Any, *, clamp: bool = False) -> int:
    """python-pptx lengths are EMU ints (or None when inherited)."""
    try:
        iv = int(v)
    except Exception:
        return 0
    if clamp and iv < 0:
        return 0
    return iv


def local_name(tag: Any) -> str:
    tag = str(tag)
    return tag.split("}", 1)[1] if "}" in tag else tag


def load_theme_colors(presentation: Any) -> Dict[str, str]:
    """Theme color scheme of the first slide master (best-effort).

    Returns mapping like {'accent1': 'RRGGBB', 'dk1': 'RRGGBB', ...}
    """
    out: Dict[str, str] = {}
    try:
        master = presentation.slide_masters[0]
        theme_part = master.part.part_related_by(RT.THEME)
        root = parse_xml(theme_part.blob)
    except Exception:
        return out

    clr = root.find(".//a:themeElements/a:clrScheme", {"a": _A_NS})
    if clr is None:
        return out

    for child in list(clr):
        key = local_name(child.tag)
        # Prefer srgbClr@val, else sysClr@lastClr
        srgb = child.find(qn("a:srgbClr"))
        if srgb is not None and srgb.get("val"):
            out[key] = str(srgb.get("val")).upper()
            continue
        sysc = child.find(qn("a:sysClr"))
        if sysc is not None and sysc.get("lastClr"):
            out[key] = str(sysc.get("lastClr")).upper()
    return out


def _int_or_none(v: Any) -> Optional[int]:
    if v is None:
        return None
    try:
        return int(str(v))
    except (TypeError, ValueError):
        return None


def _alpha_from_val_100000(val: Any) -> Optional[float]:
    try:
        iv = int(str(val))
    except Exception:
        return None
    iv = max(0, min(100000, iv))
    return iv / 100000.0


def effective_alpha(clr: Any) -> Optional[float]:
    """Alpha of a color node: a:alpha wins, else a:alphaMod/a:alphaOff on 1.0."""
    if clr is None:
        return None

    ael = clr.find(qn("a:alpha"))
    if ael is not None and ael.get("val") is not None:
        return _alpha_from_val_100000(ael.get("val"))

    mel = clr.find(qn("a:alphaMod"))
    oel = clr.find(qn("a:alphaOff"))
    mod = _alpha_from_val_100000(mel.get("val")) if mel is not None else None
    off = _alpha_from_val_100000(oel.get("val")) if oel is not None else None
    if mod is None and off is None:
        return None

    a = 1.0
    if mod is not None:
        a = a * mod
    if off is not None:
        a = a + off
    return max(0.0, min(1.0, a))


def color_from_choice(parent: Any, theme_colors: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Read the color child of a fill element (a:solidFill, a:gs, a:fgClr, ...)."""
    out: Dict[str, Any] = {}
    if parent is None:
        return out

    for tag in _COLOR_TAGS:
        clr = parent.find(qn(tag))
        if clr is None:
            continue
        kind = local_name(clr.tag)
        if kind == "srgbClr" and clr.get("val"):
            out["colorRgb"] = str(clr.get("val")).upper()
        elif kind == "schemeClr" and clr.get("val"):
            key = str(clr.get("val"))
            out["schemeColor"] = key
            key = _SCHEME_ALIASES.get(key, key)
            if theme_colors and key in theme_colors:
                out["colorRgb"] = theme_colors[key]
        elif kind == "sysClr" and clr.get("lastClr"):
            out["colorRgb"] = str(clr.get("lastClr")).upper()
        elif kind == "prstClr" and clr.get("val"):
            out["presetColor"] = str(clr.get("val"))

        a = effective_alpha(clr)
        if a is not None:
            out["alpha"] = a
        break
    return out


def fill_from_parent(parent: Any, theme_colors: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
    """Fill defined directly on an element (spPr, bgPr, tcPr, rPr, a:ln).

    Returns None when no fill is set locally (i.e. it is inherited).
    """
    if parent is None:
        return None

    if parent.find(qn("a:noFill")) is not None:
        return {"type": "none"}

    solid = parent.find(qn("a:solidFill"))
    if solid is not None:
        return {"type": "solid", **color_from_choice(solid, theme_colors)}

    grad = parent.find(qn("a:gradFill"))
    if grad is not None:
        out: Dict[str, Any] = {"type": "gradient", "stops": []}
        lin = grad.find(qn("a:lin"))
        ang = _int_or_none(lin.get("ang")) if lin is not None else None
        if ang is not None:
            out["angle"] = ang / 60000.0
        gs_lst = grad.find(qn("a:gsLst"))
        if gs_lst is not None:
            for gs in gs_lst.findall(qn("a:gs")):
                stop: Dict[str, Any] = {"position": _alpha_from_val_100000(gs.get("pos", 0))}
                stop.update(color_from_choice(gs, theme_colors))
                out["stops"].append(stop)
        return out

    patt = parent.find(qn("a:pattFill"))
    if patt is not None:
        out = {"type": "pattern", "preset": patt.get("prst")}
        fg = color_from_choice(patt.find(qn("a:fgClr")), theme_colors)
        bg = color_from_choice(patt.find(qn("a:bgClr")), theme_colors)
        if fg.get("colorRgb"):
            out["foreColorRgb"] = fg["colorRgb"]
        if bg.get("colorRgb"):
            out["backColorRgb"] = bg["colorRgb"]
        return out

    if parent.find(qn("a:blipFill")) is not None:
        return {"type": "picture"}
    if parent.find(qn("a:grpFill")) is not None:
        return {"type": "group"}
    return None


def line_from_sppr(sppr: Any, theme_colors: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
    if sppr is None:
        return None
    ln = sppr.find(qn("a:ln"))
    if ln is None:
        return None

    out: Dict[str, Any] = {}
    if ln.get("w") is not None:
        out["width"] = emu(ln.get("w"), clamp=True)
    if ln.get("cap") is not None:
        out["cap"] = ln.get("cap")
    dash = ln.find(qn("a:prstDash"))
    if dash is not None and dash.get("val"):
        out["dashStyle"] = dash.get("val")

    fill = fill_from_parent(ln, theme_colors)
    if fill is not None:
        out["fill"] = fill
        if fill.get("type") == "none":
            out["visible"] = False
        # A fully transparent line is treated as no line.
        elif isinstance(fill.get("alpha"), float) and fill["alpha"] <= 0.0:
            out["visible"] = False
    return out


def effects_from_sppr(sppr: Any) -> List[Dict[str, Any]]:
    """Effect list entries (shadows, glow, soft edges, alphaModFix opacity)."""
    out: List[Dict[str, Any]] = []
    if sppr is None:
        return out
    eff = sppr.find(qn("a:effectLst"))
    if eff is None:
        return out

    for child in list(eff):
        kind = local_name(child.tag)
        entry: Dict[str, Any] = {"type": kind}
        if kind == "alphaModFix":
            a = _alpha_from_val_100000(child.get("amt"))
            if a is not None:
                entry["opacity"] = a
        else:
            for attr in ("blurRad", "dist", "dir", "rad", "sx", "sy", "algn"):
                v = child.get(attr)
                if v is None:
                    continue
                entry[attr] = v if attr == "algn" else emu(v)
            color = color_from_choice(child)
            if color:
                entry["color"] = color
        out.append(entry)
    return out


def text_body(text_frame: Any, theme_colors: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Paragraph/run structure of a python-pptx TextFrame."""
    out: Dict[str, Any] = {"text": "", "paragraphs": []}
    if text_frame is None:
        return out

    body_pr = text_frame._txBody.find(qn("a:bodyPr"))
    if body_pr is not None:
        fmt: Dict[str, Any] = {}
        if body_pr.get("wrap") is not None:
            fmt["wrapText"] = body_pr.get("wrap") != "none"
        if body_pr.get("anchor") is not None:
            fmt["anchor"] = body_pr.get("anchor")
        for attr, key in (("lIns", "marginLeft"), ("tIns", "marginTop"), ("rIns", "marginRight"), ("bIns", "marginBottom")):
            if body_pr.get(attr) is not None:
                fmt[key] = emu(body_pr.get(attr))
        for autofit in ("normAutofit", "spAutoFit", "noAutofit"):
            if body_pr.find(qn(f"a:{autofit}")) is not None:
                fmt["autofit"] = autofit
        if fmt:
            out["frameFormat"] = fmt

    for pi, p in enumerate(text_frame.paragraphs):
        pPr = p._p.pPr
        pinfo: Dict[str, Any] = {
            "index": pi,
            "text": p.text or "",
            "alignment": pPr.get("algn") if pPr is not None else None,
            "level": (_int_or_none(pPr.get("lvl")) or 0) if pPr is not None else 0,
            "runs": [],
        }

        for ri, r in enumerate(p.runs):
            txt = r.text or ""
            if not txt:
                continue
            rinfo: Dict[str, Any] = {"index": ri, "text": txt}
            # runs without a:rPr inherit everything; r.font would add one
            if r._r.rPr is not None:
                rinfo["font"] = _font_info(r.font, r._r.rPr, theme_colors)
            pinfo["runs"].append(rinfo)

        out["paragraphs"].append(pinfo)

    out["text"] = norm_text("\n".join(p["text"] for p in out["paragraphs"]))
    return out


def _font_info(font: Any, rPr: Any, theme_colors: Optional[Dict[str, str]]) -> Dict[str, Any]:
    info: Dict[str, Any] = {}
    try:
        if font.name:
            info["name"] = font.name
    except Exception:
        pass
    try:
        if font.size is not None:
            info["size"] = font.size.pt
    except Exception:
        pass
    try:
        if font.bold is not None:
            info["bold"] = bool(font.bold)
    except Exception:
        pass
    try:
        if font.italic is not None:
            info["italic"] = bool(font.italic)
    except Exception:
        pass
    try:
        if font.underline is not None:
            info["underline"] = bool(font.underline)
    except Exception:
        pass

    fill = fill_from_parent(rPr, theme_colors)
    if fill is not None and fill.get("colorRgb"):
        info["colorRgb"] = fill["colorRgb"]
    return info
