import xml.etree.ElementTree as ET

from flowlines.models import FlowLine, FlowLinesResult, SvgStyle
from flowlines.svg import path_data, save_svg, to_svg

SVG_NS = "{http://www.w3.org/2000/svg}"


def make_result():
    lines = [
        FlowLine(((10.0, 10.0), (20.0, 15.0), (30.0, 10.0), (40.0, 20.0))),
        FlowLine(((50.0, 50.0), (60.0, 60.0))),
        FlowLine(((5.0, 5.0),)),
    ]
    return FlowLinesResult(lines=lines, width=400, height=300, seed=1)


def test_background_rect_only_when_requested():
    result = make_result()
    with_bg = to_svg(result, SvgStyle(include_background=True, background_color="#eeeeee"))
    assert "<rect" in with_bg
    assert 'fill="#eeeeee"' in with_bg
    assert "<rect" not in to_svg(result)


def test_document_structure():
    root = ET.fromstring(to_svg(make_result(), SvgStyle(optimize_paths=False)).split("?>", 1)[1])
    assert root.tag == f"{SVG_NS}svg"
    assert root.get("width") == "400"
    assert root.get("height") == "300"
    assert root.get("viewBox").replace(",", " ").split() == ["0", "0", "400", "300"]

    paths = root.findall(f"{SVG_NS}path")
    # the single point line is skipped
    assert len(paths) == 2
    for path in paths:
        assert path.get("fill") == "none"
        assert path.get("stroke") == "#000000"
        assert path.get("stroke-linecap") == "round"
        assert path.get("stroke-linejoin") == "round"


def test_stroke_style_is_applied():
    svg = to_svg(make_result(), SvgStyle(stroke_color="#123456", stroke_width=0.35))
    assert 'stroke="#123456"' in svg
    assert 'stroke-width="0.35"' in svg


def test_path_data_uses_midpoint_quadratics():
    points = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (20.0, 10.0)]
    assert path_data(points, 1) == "M0.0,0.0 Q10.0,0.0 10.0,5.0 Q10.0,10.0 15.0,10.0 L20.0,10.0"


def test_path_data_for_short_lines():
    assert path_data([(1.0, 2.0), (3.0, 4.0)]) == "M1.00,2.00 L3.00,4.00"
    assert path_data([(1.0, 2.0)]) == ""
    assert path_data([]) == ""


def test_optimize_paths_simplifies_straight_runs():
    straight = FlowLine(tuple((float(x), 100.0) for x in range(10, 200, 2)))
    result = FlowLinesResult(lines=[straight], width=400, height=300, seed=1)
    assert "Q" not in to_svg(result)
    assert "Q" in to_svg(result, SvgStyle(optimize_paths=False))


def test_save_svg_writes_file(tmp_path):
    out = save_svg(make_result(), tmp_path / "flow.svg")
    assert out.exists()
    assert out.read_text(encoding="utf-8").count("<path") == 2


def test_style_from_mapping_ignores_mistyped_values():
    style = SvgStyle.from_mapping(
        {
            "stroke_color": "#ff0000",
            "stroke_width": "thick",
            "include_background": True,
            "precision": True,
            "simplify_epsilon": 2,
        }
    )
    assert style.stroke_color == "#ff0000"
    assert style.stroke_width == 1.0
    assert style.include_background is True
    assert style.precision == 2
    assert style.simplify_epsilon == 2
