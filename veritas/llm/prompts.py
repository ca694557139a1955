from __future__ import annotations

import json
from typing import Any

from veritas.models.media import FileType, Language, MediaFile
from veritas.models.verdict import AnalysisResult
from veritas.models.video import EvidenceBundle


MASTER_SYSTEM_PROMPT = """You are a world-class forensic AI verification system named 'Veritas'.
Your mission is to detect manipulation, AI generation, or any form of falsification in digital media.
You must conduct a thorough analysis of all available data, including metadata, file structure, visual/auditory patterns, and content.
In addition to your internal analysis, you MUST perform public research by searching for the content online to find context, original sources, and fact-checks from reputable outlets.
Your output must be neutral, factual, and strictly based on evidence from both your internal analysis and public research.
Provide clear, explainable results. If the evidence is insufficient for a definitive conclusion, you must state the result as "Inconclusive".
Never guess or fabricate information. Your credibility is paramount.
Populate all fields of the JSON schema, including 'publicResearch', 'documents', and 'sources'. If no information is found for a field, return an empty array for it."""

IMAGE_PROMPT = (
    "Analyze this image for any signs of AI generation (e.g., Midjourney, DALL-E) or digital manipulation "
    "(e.g., Photoshop). Scrutinize metadata (EXIF), lighting consistency, shadow integrity, facial symmetry, "
    "pixel-level noise patterns, and for any known AI watermarks or artifacts. Cross-reference with reverse "
    "image search databases."
)

VIDEO_PROMPT = (
    "Analyze this video for deepfake characteristics or digital manipulation. Perform a frame-by-frame analysis "
    "to check for continuity errors. Scrutinize facial movements, especially eye blinking and expressions, for "
    "unnatural patterns. Verify lip-sync accuracy and check for audio-video mismatches. Look for artifacts "
    "common in AI-generated or edited videos."
)

VIDEO_FRAMES_PROMPT = (
    "Analyze this sequence of video frames and the accompanying audio transcript for deepfake characteristics "
    "or digital manipulation. Perform a frame-by-frame analysis to check for continuity errors. Scrutinize "
    "facial movements, especially eye blinking and expressions, for unnatural patterns. Verify lip-sync accuracy "
    "by comparing the transcript to the frames. Look for artifacts common in AI-generated or edited videos across "
    "the frame sequence. The audio transcript is provided for context."
)

DOCUMENT_PROMPT = (
    "Forensically analyze this document (PDF/Word) for evidence of editing, forgery, or AI-generated text. "
    "Examine metadata for revision history and author information. Analyze font consistency, formatting, and "
    "layout for anomalies. Check for forged signatures, altered dates, or fake stamps. Score the text for "
    "AI-generation probability using stylistic and linguistic analysis."
)

AUDIO_PROMPT = (
    "Analyze this audio file for signs of AI generation, splicing, or manipulation. Examine the waveform and "
    "spectrogram for inconsistencies, unnatural noise floor changes, or artifacts. Analyze vocal patterns, "
    "pitch, and cadence for characteristics of AI voice synthesis. If it is a recording of a real event, check "
    "for edits or tampering."
)

TRANSLATION_SYSTEM = (
    "You are an expert multilingual translator specializing in structured data. Your task is to translate "
    "specific text fields within a JSON object while preserving its structure and non-textual data perfectly."
)


def prompt_for_file_type(file_type: FileType, has_evidence_bundle: bool = False) -> str:
    if file_type is FileType.IMAGE:
        return IMAGE_PROMPT
    if file_type is FileType.VIDEO:
        return VIDEO_FRAMES_PROMPT if has_evidence_bundle else VIDEO_PROMPT
    if file_type is FileType.DOCUMENT:
        return DOCUMENT_PROMPT
    if file_type is FileType.AUDIO:
        return AUDIO_PROMPT
    raise ValueError(f"Unsupported file type for prompt generation: {file_type}")


def build_analysis_system(language: Language) -> str:
    return (
        f"{MASTER_SYSTEM_PROMPT}\n\nIMPORTANT: Your entire response, including all fields in the JSON output "
        f"(summary, findings, etc.), MUST be in {language.display_name}."
    )


def build_bundle_parts(bundle: EvidenceBundle) -> list[dict[str, Any]]:
    """Текстовый блок (промпт + транскрипт + метаданные) и по inlineData на кадр."""
    prompt = prompt_for_file_type(FileType.VIDEO, has_evidence_bundle=True)
    text = (
        f"{prompt}\n\nAudio Transcript: {bundle.audio_transcript}\n\n"
        f"Metadata: {json.dumps(bundle.metadata.to_dict())}"
    )
    parts: list[dict[str, Any]] = [{"text": text}]
    for frame in bundle.frames:
        parts.append({"inlineData": {"mimeType": "image/jpeg", "data": frame.b64}})
    return parts


def build_file_parts(media: MediaFile, data_b64: str) -> list[dict[str, Any]]:
    return [
        {"inlineData": {"mimeType": media.mime_type, "data": data_b64}},
        {"text": prompt_for_file_type(media.file_type)},
    ]


def build_translate_text_prompt(text: str, language: Language) -> str:
    return (
        f"Translate the following text into {language.display_name}. Respond with only the translated text, "
        f"without any additional commentary or quotation marks.\n\n"
        f'Text: "{text}"'
    )


def build_translate_result_prompt(result: AnalysisResult, language: Language) -> str:
    payload = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    return (
        "Translate the user-facing text fields ('summary', 'finding', 'explanation', and the 'title' and "
        "'summary' fields within 'publicResearch', 'title' in 'documents', and 'title' in 'sources') in the "
        f"following JSON object into {language.display_name}.\n"
        "- Maintain the exact original JSON structure.\n"
        "- Do NOT translate field names (keys).\n"
        "- Do NOT alter non-text values like URLs, 'trustScore', 'status', or 'verdict'.\n"
        "- Your output MUST be a valid JSON object conforming to the provided schema.\n\n"
        f"JSON to translate:\n{payload}"
    )
