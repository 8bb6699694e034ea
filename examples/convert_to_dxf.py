import dxfkit
from dxfkit.entity import Circle, Line
from dxfkit.points import Point


doc = dxfkit.Document(entities=dxfkit.EntitySection([Line(end=Point(3.0, 4.0)), Circle(radius=1.5)]))
print(dxfkit.writefile(doc, "/tmp/plan_r12.dxf", dxfkit.DxfContext(version=dxfkit.DxfVersion.R12)))

result = dxfkit.export_ezdxf(
    "/tmp/plan_r12.dxf",
    "/tmp/plan_r2010_out.dxf",
    types="LINE",
    dxf_version="R2010",
)
print(result)
