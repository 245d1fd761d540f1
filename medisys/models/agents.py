"""
Agent registry: the fixed set of agents and their display metadata.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict


class AgentType(str, Enum):
    """Identifiers of the coordinator and the four specialised agents."""

    COORDINATOR = "COORDINATOR"
    AIP = "AIP"  # Asisten Informasi Pasien
    PDM = "PDM"  # Pembuat Dokumen Medis
    PAVM = "PAVM"  # Penghasil Alat Bantu Visual Medis
    APK = "APK"  # Asisten Penelitian Klinis


# Agents the coordinator may route to; COORDINATOR is display-only
DISPATCHABLE_AGENTS: tuple[AgentType, ...] = (
    AgentType.AIP,
    AgentType.PDM,
    AgentType.PAVM,
    AgentType.APK,
)


class AgentDefinition(BaseModel):
    """Display metadata for one agent."""

    id: AgentType
    name: str
    full_name: str
    description: str
    color: str
    icon: str

    model_config = ConfigDict(frozen=True)


AGENTS: dict[AgentType, AgentDefinition] = {
    AgentType.COORDINATOR: AgentDefinition(
        id=AgentType.COORDINATOR,
        name="Koordinator",
        full_name="Koordinator Sistem Rumah Sakit",
        description="Menganalisis permintaan dan mendelegasikannya ke agen spesialis.",
        color="bg-blue-600",
        icon="coordinator",
    ),
    AgentType.AIP: AgentDefinition(
        id=AgentType.AIP,
        name="AIP",
        full_name="Asisten Informasi Pasien",
        description="Informasi umum pasien, gejala penyakit, dan kebijakan rumah sakit.",
        color="bg-emerald-500",
        icon="info",
    ),
    AgentType.PDM: AgentDefinition(
        id=AgentType.PDM,
        name="PDM",
        full_name="Pembuat Dokumen Medis",
        description="Pembuatan dokumen formal seperti surat rujukan dan laporan medis.",
        color="bg-amber-500",
        icon="document",
    ),
    AgentType.PAVM: AgentDefinition(
        id=AgentType.PAVM,
        name="PAVM",
        full_name="Penghasil Alat Bantu Visual Medis",
        description="Ilustrasi, diagram, dan materi visual edukasi medis.",
        color="bg-purple-500",
        icon="visual",
    ),
    AgentType.APK: AgentDefinition(
        id=AgentType.APK,
        name="APK",
        full_name="Asisten Penelitian Klinis",
        description="Riset mendalam, studi klinis, dan jurnal medis untuk tenaga kesehatan.",
        color="bg-rose-500",
        icon="research",
    ),
}


def get_agent(agent: AgentType) -> AgentDefinition:
    """Returns the display metadata for an agent."""
    return AGENTS[agent]
