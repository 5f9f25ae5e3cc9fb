from typing import Dict

from workshop_flow.domain.models import ChecklistTemplate, DecisionOption, Step, StepInput

# ==============================================================================
# STANDARD ASSEMBLY (fallback when a workshop has no template of its own)
# ==============================================================================

STANDARD_ASSEMBLY = ChecklistTemplate(
    name="standard_assembly",
    title="Standard Assembly",
    steps=[
        Step(
            id="mount_handlebar",
            kind="action",
            title="Mount handlebar",
            description="Align the handlebar straight and tighten to the specified torque.",
            required=True,
        ),
        Step(
            id="install_front_wheel",
            kind="action",
            title="Install front wheel",
            description="Mind the rotation direction of the tyre.",
            required=True,
        ),
        Step(
            id="mount_pedals",
            kind="action",
            title="Mount pedals",
            description="Grease the threads! Left pedal has a reverse thread.",
            required=True,
            warning=True,
        ),
        Step(
            id="adjust_gears",
            kind="action",
            title="Adjust gears",
            description="Shift through all gears on the stand.",
            required=True,
        ),
        Step(
            id="check_brakes",
            kind="action",
            title="Check brakes",
            description="Check pressure point and pads.",
            required=True,
            warning=True,
        ),
        Step(
            id="check_lights",
            kind="action",
            title="Check lighting",
            description="Run a function test of front and rear light.",
            required=True,
        ),
        Step(
            id="final_test_ride",
            kind="action",
            title="Final inspection & test ride",
            description="Everything tight? Nothing rattling?",
            required=True,
        ),
    ],
)

# ==============================================================================
# E-BIKE ASSEMBLY (branches on brake system and drive type)
# ==============================================================================

_hydraulic_steps = [
    Step(
        id="check_brake_fluid",
        kind="input",
        title="Check brake fluid level",
        description="Inspect the reservoir and note the fluid type.",
        required=True,
        inputs=[StepInput(type="text", label="Fluid type", placeholder="DOT 4 / mineral oil")],
    ),
    Step(
        id="bleed_brakes",
        kind="action",
        title="Bleed brakes if spongy",
        description="Only needed when the lever pulls to the bar.",
    ),
]

_mechanical_steps = [
    Step(
        id="tension_brake_cables",
        kind="action",
        title="Tension brake cables",
        description="Adjust the barrel adjuster until the pads bite at a third of lever travel.",
        required=True,
    ),
]

_mid_motor_steps = [
    Step(
        id="torque_motor_bolts",
        kind="input",
        title="Torque motor mounting bolts",
        required=True,
        warning=True,
        inputs=[StepInput(type="torque", label="Torque", unit="Nm", required=True)],
    ),
    Step(
        id="display_type",
        kind="decision",
        title="Which display is fitted?",
        options=[
            DecisionOption(
                label="Colour display",
                value="color",
                injected_steps=[
                    Step(
                        id="update_display_firmware",
                        kind="action",
                        title="Update display firmware",
                        description="Connect the diagnostic tool and install the latest release.",
                    ),
                ],
            ),
            DecisionOption(label="Basic remote", value="basic"),
        ],
    ),
]

_hub_motor_steps = [
    Step(
        id="check_torque_arms",
        kind="action",
        title="Check torque arms",
        description="Both torque arms seated and tightened.",
        required=True,
        warning=True,
    ),
]

EBIKE_ASSEMBLY = ChecklistTemplate(
    name="ebike_assembly",
    title="E-Bike Assembly",
    steps=[
        Step(
            id="unpack_inspect",
            kind="action",
            title="Unpack and inspect for transport damage",
            required=True,
        ),
        Step(
            id="brake_system",
            kind="decision",
            title="Which brake system is fitted?",
            required=True,
            options=[
                DecisionOption(label="Hydraulic", value="hydraulic", injected_steps=_hydraulic_steps),
                DecisionOption(label="Mechanical", value="mechanical", injected_steps=_mechanical_steps),
            ],
        ),
        Step(
            id="drive_type",
            kind="decision",
            title="Which drive is fitted?",
            required=True,
            options=[
                DecisionOption(label="Mid motor", value="mid", injected_steps=_mid_motor_steps),
                DecisionOption(label="Hub motor", value="hub", injected_steps=_hub_motor_steps),
            ],
        ),
        Step(
            id="battery_charge",
            kind="input",
            title="Record battery charge",
            inputs=[StepInput(type="number", label="Charge", unit="%")],
        ),
        Step(
            id="frame_number",
            kind="input",
            title="Record frame number",
            required=True,
            inputs=[StepInput(type="text", label="Frame number", required=True)],
        ),
        Step(
            id="ebike_test_ride",
            kind="action",
            title="Test ride with motor assistance",
            description="Check all support levels and the walk assist.",
            required=True,
        ),
    ],
)

# ==============================================================================
# FINAL INSPECTION (quality control pass after assembly)
# ==============================================================================

FINAL_INSPECTION = ChecklistTemplate(
    name="final_inspection",
    title="Final Inspection",
    steps=[
        Step(id="qc_bolts", kind="action", title="All bolts torqued", required=True),
        Step(id="qc_brakes", kind="action", title="Brakes bite evenly", required=True),
        Step(id="qc_gears", kind="action", title="Gears shift cleanly"),
        Step(id="qc_tyres", kind="action", title="Tyre pressure set"),
        Step(id="qc_accessories", kind="action", title="Accessories attached"),
    ],
)

# ==============================================================================
# REGISTRY
# ==============================================================================

DEFAULT_TEMPLATES: Dict[str, ChecklistTemplate] = {
    template.name: template
    for template in (STANDARD_ASSEMBLY, EBIKE_ASSEMBLY, FINAL_INSPECTION)
}
