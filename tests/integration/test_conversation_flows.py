"""
Integration tests for complete turns through the pipeline graph.
Only the model gateway is mocked.
"""

import pytest
from unittest.mock import patch

from conftest import image_response, intent_response, text_response
from medisys.graph.builder import build_graph
from medisys.models.agents import AgentType
from medisys.services.conversation_service import ConversationSession, create_session
from medisys.services.gateway import GatewayError
from medisys.utils.formatting import display_sources, parse_data_uri


@pytest.fixture
def session(mock_gateway, settings):
    """Session running the real graph against the mocked gateway."""
    return create_session(settings, gateway=mock_gateway)


@pytest.mark.integration
class TestPatientInfoFlow:
    """Tests for a general patient question."""

    @pytest.mark.asyncio
    async def test_dengue_symptoms_routed_to_aip(
        self, session, mock_gateway, sample_sources
    ):
        """Should answer with search grounding and no image."""
        # Arrange
        mock_gateway.generate.side_effect = [
            intent_response(
                "AIP",
                "Pertanyaan umum tentang gejala penyakit.",
                "Jelaskan gejala demam berdarah dengue dengan bahasa awam.",
            ),
            text_response(
                "Gejala demam berdarah antara lain demam tinggi mendadak...",
                sample_sources,
            ),
        ]

        # Act
        reply = await session.submit("Apa saja gejala demam berdarah?")

        # Assert
        assert len(session.messages) == 3
        assert [m.role for m in session.messages[1:]] == ["user", "model"]
        assert reply.agent == AgentType.AIP
        assert reply.image_url is None
        assert len(reply.grounding_sources) == 5
        assert len(display_sources(reply, limit=3)) == 3
        assert session.is_processing is False

        agent_call = mock_gateway.generate.call_args_list[1]
        assert (
            agent_call.args[0]
            == "Jelaskan gejala demam berdarah dengue dengan bahasa awam."
        )
        assert agent_call.kwargs["use_search"] is True


@pytest.mark.integration
class TestDocumentFlow:
    """Tests for a document generation request."""

    @pytest.mark.asyncio
    async def test_referral_letter_routed_to_pdm(self, session, mock_gateway):
        # Arrange
        document = (
            "# SURAT RUJUKAN PASIEN\n\n"
            "**Tanggal:** [Tanggal]\n\n"
            "**Nama Pasien:** [Nama Pasien]\n\n"
            "Dengan hormat, ..."
        )
        mock_gateway.generate.side_effect = [
            intent_response(
                "PDM",
                "Permintaan pembuatan dokumen formal.",
                "Buat surat rujukan pasien ke dokter spesialis.",
            ),
            text_response(document, [("https://example.org", "Contoh")]),
        ]

        # Act
        reply = await session.submit("Buatkan surat rujukan pasien ke dokter spesialis")

        # Assert
        assert reply.agent == AgentType.PDM
        assert reply.content.startswith("# SURAT RUJUKAN")
        assert "[Nama Pasien]" in reply.content
        assert reply.grounding_sources is None
        assert mock_gateway.generate.call_args_list[1].kwargs["use_search"] is False


@pytest.mark.integration
class TestVisualFlow:
    """Tests for an image generation request."""

    @pytest.mark.asyncio
    async def test_heart_diagram_routed_to_pavm(self, session, mock_gateway):
        # Arrange
        mock_gateway.generate.side_effect = [
            intent_response(
                "PAVM",
                "Permintaan diagram.",
                "Diagram anatomi jantung manusia berlabel.",
            ),
            image_response(),
        ]

        # Act
        reply = await session.submit("Gambarkan diagram struktur jantung manusia")

        # Assert
        assert reply.agent == AgentType.PAVM
        assert reply.image_url
        mime_type, data = parse_data_uri(reply.image_url)
        assert mime_type == "image/png"
        assert data
        assert reply.content == "Berikut adalah visualisasi yang Anda minta."


@pytest.mark.integration
class TestFallbackFlows:
    """Tests for turns where a model call fails."""

    @pytest.mark.asyncio
    async def test_classification_failure_still_answers(self, session, mock_gateway):
        """Should fall back to AIP with the original text and still run the agent."""
        # Arrange
        mock_gateway.generate.side_effect = [
            GatewayError("coordinator down"),
            text_response("Jawaban umum."),
        ]

        # Act
        reply = await session.submit("Jam besuk rumah sakit?")

        # Assert
        assert len(session.messages) == 3
        assert reply.agent == AgentType.AIP
        assert reply.content == "Jawaban umum."
        assert mock_gateway.generate.await_count == 2
        assert mock_gateway.generate.call_args_list[1].args[0] == "Jam besuk rumah sakit?"

    @pytest.mark.asyncio
    async def test_execution_failure_appends_apology(self, session, mock_gateway):
        mock_gateway.generate.side_effect = [
            intent_response("APK", "Riset klinis.", "Tinjau studi terbaru."),
            GatewayError("agent down"),
        ]

        reply = await session.submit("Studi terbaru tentang vaksin dengue")

        assert reply.agent == AgentType.APK
        assert reply.content.startswith("Terjadi kesalahan")
        assert len(session.messages) == 3

    @pytest.mark.asyncio
    async def test_unexpected_error_appends_generic_message(
        self, session, mock_gateway
    ):
        """Should end the turn idle with one generic error message."""
        mock_gateway.generate.side_effect = [
            intent_response("AIP", "Alasan.", "Prompt."),
            text_response("Jawaban"),
        ]

        with patch(
            "medisys.services.agent_service.AgentService.execute",
            side_effect=RuntimeError("unexpected"),
        ):
            reply = await session.submit("Pertanyaan")

        assert reply.agent == AgentType.COORDINATOR
        assert reply.content == "Maaf, terjadi kesalahan sistem. Mohon coba lagi."
        assert len(session.messages) == 3
        assert session.is_processing is False


@pytest.mark.integration
class TestGraphConstruction:
    @patch("medisys.graph.builder.create_gateway")
    def test_gateway_created_from_settings(self, mock_create_gateway, settings):
        """Should build the gateway from settings when none is injected."""
        build_graph(settings=settings)

        mock_create_gateway.assert_called_once_with(settings)

    @pytest.mark.asyncio
    async def test_every_turn_adds_exactly_one_model_message(
        self, mock_gateway, settings
    ):
        session = ConversationSession(build_graph(mock_gateway, settings), settings)
        mock_gateway.generate.side_effect = [
            intent_response("AIP", "a", "p1"),
            text_response("r1"),
            GatewayError("down"),
            text_response("r2"),
            intent_response("PAVM", "b", "p3"),
            image_response(with_image=False),
        ]

        for query in ["satu", "dua", "tiga"]:
            await session.submit(query)

        assert [m.role for m in session.messages] == [
            "model", "user", "model", "user", "model", "user", "model",
        ]
        assert session.messages[-1].image_url is None
