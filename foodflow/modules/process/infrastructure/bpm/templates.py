"""
Food process BPMN template catalogue.
The XML is descriptive only: the runtime stores it verbatim and never walks
its sequence flows or evaluates gateway conditions.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TemplateCategory(str, Enum):
    MANUFACTURING = "MANUFACTURING"
    QUALITY_CONTROL = "QUALITY_CONTROL"
    HACCP = "HACCP"
    HYGIENE = "HYGIENE"
    PACKAGING = "PACKAGING"


@dataclass(frozen=True)
class ProcessTemplate:
    id: str
    name: str
    description: str
    category: TemplateCategory
    bpmn_xml: str
    variables: dict[str, Any] = field(default_factory=dict)


_BPMN_NS = 'xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL"'


def _definitions(definitions_id: str, process_id: str, name: str, body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<bpmn:definitions {_BPMN_NS}\n'
        f'                   id="{definitions_id}"\n'
        '                   targetNamespace="http://bpmn.io/schema/bpmn">\n'
        f'  <bpmn:process id="{process_id}" name="{name}" isExecutable="true">\n'
        f"{body}"
        "  </bpmn:process>\n"
        "</bpmn:definitions>"
    )


def _linear_body(start_name: str, end_name: str, steps: list[tuple[str, str, str | None]]) -> str:
    """Start event, a chain of user tasks (id, name, documentation), end event."""
    lines = [f'    <bpmn:startEvent id="StartEvent_1" name="{start_name}"/>']
    previous = "StartEvent_1"
    for index, (task_id, task_name, doc) in enumerate(steps, start=1):
        lines.append(f'    <bpmn:sequenceFlow id="Flow_{index}" sourceRef="{previous}" targetRef="{task_id}"/>')
        if doc:
            lines.append(f'    <bpmn:userTask id="{task_id}" name="{task_name}">')
            lines.append(f"      <bpmn:documentation>{doc}</bpmn:documentation>")
            lines.append("    </bpmn:userTask>")
        else:
            lines.append(f'    <bpmn:userTask id="{task_id}" name="{task_name}"/>')
        previous = task_id
    lines.append(
        f'    <bpmn:sequenceFlow id="Flow_{len(steps) + 1}" sourceRef="{previous}" targetRef="EndEvent_1"/>'
    )
    lines.append(f'    <bpmn:endEvent id="EndEvent_1" name="{end_name}"/>')
    return "\n".join(lines) + "\n"


_BREAD_XML = _definitions(
    "BreadManufacturing",
    "BreadProcess",
    "Bread Manufacturing",
    _linear_body("Start production", "Production finished", [
        ("Task_MaterialPrep", "Prepare and weigh ingredients", "Flour, water, yeast, salt, sugar"),
        ("Task_Mixing", "Mixing", "Mix and knead the dough (15-20 min)"),
        ("CCP_Fermentation", "First fermentation (CCP-1)", "Temperature 27-30C, humidity 75-85%, 60-90 min"),
        ("Task_Shaping", "Shaping", None),
        ("Task_SecondFerment", "Second fermentation", "Temperature 35-38C, humidity 80-85%, 30-40 min"),
        ("CCP_Baking", "Baking (CCP-2)", "Temperature 180-200C, 20-30 min, core temperature 95C or above"),
        ("CCP_Cooling", "Cooling (CCP-3)", "Cool at room temperature for 30 min or more, core 35C or below"),
        ("Task_Packaging", "Packaging", "Individual wrapping and labelling (LOT number, expiry date)"),
        ("Task_FinalInspection", "Final inspection", "Appearance, weight, packaging condition"),
    ]),
)

_MILK_XML = _definitions(
    "MilkPasteurization",
    "MilkProcess",
    "Milk Pasteurization",
    """\
    <bpmn:startEvent id="StartEvent_1" name="Start process"/>
    <bpmn:sequenceFlow id="Flow_1" sourceRef="StartEvent_1" targetRef="CCP_Reception"/>
    <bpmn:userTask id="CCP_Reception" name="Raw milk reception (CCP-1)">
      <bpmn:documentation>Temperature 10C or below, bacteria count, antibiotic residue test</bpmn:documentation>
    </bpmn:userTask>
    <bpmn:sequenceFlow id="Flow_2" sourceRef="CCP_Reception" targetRef="Gateway_QC"/>
    <bpmn:exclusiveGateway id="Gateway_QC" name="Quality acceptable?"/>
    <bpmn:sequenceFlow id="Flow_Pass" sourceRef="Gateway_QC" targetRef="Task_Storage">
      <bpmn:conditionExpression>passed == true</bpmn:conditionExpression>
    </bpmn:sequenceFlow>
    <bpmn:sequenceFlow id="Flow_Fail" sourceRef="Gateway_QC" targetRef="Task_Reject">
      <bpmn:conditionExpression>passed == false</bpmn:conditionExpression>
    </bpmn:sequenceFlow>
    <bpmn:userTask id="Task_Reject" name="Reject handling"/>
    <bpmn:sequenceFlow id="Flow_Reject" sourceRef="Task_Reject" targetRef="EndEvent_Reject"/>
    <bpmn:endEvent id="EndEvent_Reject" name="Process ended (rejected)"/>
    <bpmn:userTask id="Task_Storage" name="Cold storage">
      <bpmn:documentation>Keep at 0-4C</bpmn:documentation>
    </bpmn:userTask>
    <bpmn:sequenceFlow id="Flow_3" sourceRef="Task_Storage" targetRef="Task_Filtration"/>
    <bpmn:userTask id="Task_Filtration" name="Filtration"/>
    <bpmn:sequenceFlow id="Flow_4" sourceRef="Task_Filtration" targetRef="Task_Homogenization"/>
    <bpmn:userTask id="Task_Homogenization" name="Homogenization">
      <bpmn:documentation>Pressure 150-200 bar</bpmn:documentation>
    </bpmn:userTask>
    <bpmn:sequenceFlow id="Flow_5" sourceRef="Task_Homogenization" targetRef="CCP_Pasteurization"/>
    <bpmn:userTask id="CCP_Pasteurization" name="Pasteurization (CCP-2)">
      <bpmn:documentation>HTST 72-75C for 15 s or UHT 135-150C for 2-4 s</bpmn:documentation>
    </bpmn:userTask>
    <bpmn:sequenceFlow id="Flow_6" sourceRef="CCP_Pasteurization" targetRef="CCP_Cooling"/>
    <bpmn:userTask id="CCP_Cooling" name="Cooling (CCP-3)">
      <bpmn:documentation>Rapid cooling to 4C or below</bpmn:documentation>
    </bpmn:userTask>
    <bpmn:sequenceFlow id="Flow_7" sourceRef="CCP_Cooling" targetRef="Task_AsepticPackaging"/>
    <bpmn:userTask id="Task_AsepticPackaging" name="Aseptic filling and packaging"/>
    <bpmn:sequenceFlow id="Flow_8" sourceRef="Task_AsepticPackaging" targetRef="Task_QualityTest"/>
    <bpmn:userTask id="Task_QualityTest" name="Product inspection">
      <bpmn:documentation>Bacteria count, taste, smell, colour</bpmn:documentation>
    </bpmn:userTask>
    <bpmn:sequenceFlow id="Flow_9" sourceRef="Task_QualityTest" targetRef="EndEvent_1"/>
    <bpmn:endEvent id="EndEvent_1" name="Process finished"/>
""",
)

_KIMCHI_XML = _definitions(
    "KimchiManufacturing",
    "KimchiProcess",
    "Kimchi Manufacturing",
    _linear_body("Start production", "Production finished", [
        ("Task_MaterialInspection", "Raw material inspection", "Cabbage, radish, chili powder freshness and foreign matter"),
        ("CCP_Washing", "Washing (CCP-1)", "Wash 3 times or more, remove pesticide residue, chlorinated water 100 ppm"),
        ("Task_Salting", "Salting", "Brine 10-12%, 6-8 hours"),
        ("Task_Rinsing", "Rinsing and draining", None),
        ("Task_SeasoningPrep", "Seasoning preparation", "Chili powder, garlic, ginger, fish sauce"),
        ("CCP_Mixing", "Mixing with seasoning (CCP-2)", "Refrigerated room at 10C or below, sanitary gloves"),
        ("Task_Packaging", "Packaging", "Vacuum pack or sealed container, LOT number label"),
        ("CCP_Storage", "Ripening and storage (CCP-3)", "Temperature 0-5C, humidity 85-90%"),
        ("Task_FinalInspection", "Final inspection", "pH, salinity, sensory test"),
    ]),
)

_HYGIENE_XML = _definitions(
    "HygieneInspection",
    "HygieneProcess",
    "Daily Hygiene Inspection",
    _linear_body("Start inspection", "Inspection finished", [
        ("Task_PersonalHygiene", "Personal hygiene check", "Work clothes, cap, mask, hand washing"),
        ("Task_FacilityClean", "Facility cleaning check", "Floor, walls, ceiling, drains"),
        ("Task_EquipmentSanitize", "Equipment cleaning and sanitizing", "Detergent and sanitizer concentration"),
        ("Task_PestControl", "Pest control check", "Insect traps, rodent traps, entrances"),
        ("Task_TemperatureCheck", "Temperature control check", "Record refrigerator and freezer temperatures"),
        ("Task_RecordKeeping", "Complete and sign records", None),
    ]),
)


FOOD_PROCESS_TEMPLATES: list[ProcessTemplate] = [
    ProcessTemplate(
        id="bread-manufacturing",
        name="Bread Manufacturing",
        description="Full bread process (mixing, fermentation, shaping, baking, packaging)",
        category=TemplateCategory.MANUFACTURING,
        bpmn_xml=_BREAD_XML,
        variables={"productName": "White bread", "batchSize": 100, "targetTemperature": 190},
    ),
    ProcessTemplate(
        id="milk-pasteurization",
        name="Milk Pasteurization",
        description="Raw milk pasteurization and packaging (HTST/UHT)",
        category=TemplateCategory.HACCP,
        bpmn_xml=_MILK_XML,
        variables={"productType": "Pasteurized milk", "pasteurizationType": "HTST"},
    ),
    ProcessTemplate(
        id="kimchi-manufacturing",
        name="Kimchi Manufacturing",
        description="Napa cabbage kimchi, end to end",
        category=TemplateCategory.MANUFACTURING,
        bpmn_xml=_KIMCHI_XML,
        variables={"productName": "Napa cabbage kimchi", "saltingTime": 480},
    ),
    ProcessTemplate(
        id="hygiene-inspection",
        name="Daily Hygiene Inspection",
        description="HACCP daily sanitation inspection",
        category=TemplateCategory.HYGIENE,
        bpmn_xml=_HYGIENE_XML,
    ),
]


def get_template_by_id(template_id: str) -> ProcessTemplate | None:
    return next((t for t in FOOD_PROCESS_TEMPLATES if t.id == template_id), None)


def get_templates_by_category(category: TemplateCategory | str) -> list[ProcessTemplate]:
    category = TemplateCategory(category)
    return [t for t in FOOD_PROCESS_TEMPLATES if t.category == category]


def get_all_templates() -> list[ProcessTemplate]:
    return list(FOOD_PROCESS_TEMPLATES)
