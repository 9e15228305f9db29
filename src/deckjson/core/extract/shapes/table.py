from __future__ import annotations

import logging
from typing import Any, Dict, List

from pptx.oxml.ns import qn

from ..formats import emu, fill_from_parent, norm_text, text_body
from .base import ShapeExtractor

logger = logging.getLogger(__name__)

_FLAGS = (
    ("firstRow", "first_row"),
    ("firstCol", "first_col"),
    ("lastRow", "last_row"),
    ("lastCol", "last_col"),
    ("horzBanding", "horz_banding"),
    ("vertBanding", "vert_banding"),
)


class TableExtractor(ShapeExtractor):
    name = "TableExtractor"
    version = "1.1.0"
    supported_types = frozenset({"Table"})
    shape_type = "Table"

    def default_payload(self) -> Dict[str, Any]:
        return {"tableProperties": {"rows": [], "columns": []}}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        table = node.table
        theme = context.theme_colors

        columns = [{"index": ci, "width": emu(col.width, clamp=True)} for ci, col in enumerate(table.columns)]

        rows: List[Dict[str, Any]] = []
        for ri, row in enumerate(table.rows):
            cells = [self._cell(cell, ri, ci, theme) for ci, cell in enumerate(row.cells)]
            rows.append({"index": ri, "height": emu(row.height, clamp=True), "cells": cells})

        props: Dict[str, Any] = {"rows": rows, "columns": columns}
        for key, attr in _FLAGS:
            props[key] = bool(getattr(table, attr, False))

        if options.include_metadata:
            try:
                props["tableStyle"] = self.table_style(table)
            except Exception as exc:
                path = f"{context.path}/tableStyle"
                logger.warning("%s - table style unreadable at %s: %s", self.name, path, exc)
                context.record_error(path, self.name, f"tableStyle: {exc}")
                props["tableStyle"] = None

        return {
            "shapeType": self.shape_type,
            **self.basic_properties(node, context),
            "tableProperties": props,
        }

    @staticmethod
    def table_style(table: Any) -> Dict[str, Any]:
        tbl_pr = table._tbl.tblPr
        style = tbl_pr.find(qn("a:tableStyleId")) if tbl_pr is not None else None
        return {"styleId": style.text.strip() if style is not None and style.text else None}

    def _cell(self, cell: Any, ri: int, ci: int, theme: Dict[str, str]) -> Dict[str, Any]:
        tc = cell._tc
        out: Dict[str, Any] = {
            "row": ri,
            "col": ci,
            "text": "",
            "paragraphs": [],
            "rowSpan": int(cell.span_height),
            "colSpan": int(cell.span_width),
            "isMergeOrigin": bool(cell.is_merge_origin),
            "isSpanned": bool(cell.is_spanned),
            "margins": {
                "left": emu(cell.margin_left),
                "top": emu(cell.margin_top),
                "right": emu(cell.margin_right),
                "bottom": emu(cell.margin_bottom),
            },
        }

        # _Cell.text_frame adds a:txBody when missing
        if tc.txBody is not None:
            body = text_body(cell.text_frame, theme)
            out["text"] = norm_text(body["text"])
            out["paragraphs"] = body["paragraphs"]

        anchor = cell.vertical_anchor
        if anchor is not None:
            out["anchor"] = getattr(anchor, "name", str(anchor))

        fill = fill_from_parent(tc.tcPr, theme)
        if fill is not None:
            out["fillFormat"] = fill
        return out
