from __future__ import annotations

# Gemini responseSchema (OpenAPI subset), типы в верхнем регистре

FINDING_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "finding": {
            "type": "STRING",
            "description": "A short title for the specific finding, e.g., 'Metadata Anomaly' or 'Consistent Pixel Pattern'.",
        },
        "explanation": {
            "type": "STRING",
            "description": "A detailed explanation of this specific finding and why it impacts the trust score.",
        },
        "verdict": {
            "type": "STRING",
            "enum": ["Authentic", "Suspicious", "Manipulated"],
            "description": "The verdict for this specific finding.",
        },
    },
    "required": ["finding", "explanation", "verdict"],
}

PUBLIC_RESEARCH_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "The headline or title of the research finding."},
        "summary": {"type": "STRING", "description": "A brief summary of what the public source says about the content."},
        "sourceUrl": {"type": "STRING", "description": "The direct URL to the source article or page."},
        "sourceName": {"type": "STRING", "description": "The name of the source (e.g., 'Reuters', 'Snopes')."},
    },
    "required": ["title", "summary", "sourceUrl", "sourceName"],
}

LINK_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "url": {"type": "STRING"},
    },
    "required": ["title", "url"],
}

ANALYSIS_RESULT_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "trustScore": {
            "type": "INTEGER",
            "description": "A numerical score from 0 to 100 representing the authenticity of the file. 0 is definitively fake, 100 is completely authentic.",
        },
        "status": {
            "type": "STRING",
            "enum": ["Authentic", "Suspicious", "Likely Fake", "Inconclusive"],
            "description": "A single-word verdict based on the trust score. Authentic: 85-100, Suspicious: 40-84, Likely Fake: 0-39, Inconclusive if unsure.",
        },
        "summary": {
            "type": "STRING",
            "description": "A concise, one-paragraph summary of the overall findings.",
        },
        "findings": {
            "type": "ARRAY",
            "items": FINDING_SCHEMA,
            "description": "An array of specific forensic findings, both positive and negative.",
        },
        "publicResearch": {
            "type": "ARRAY",
            "items": PUBLIC_RESEARCH_SCHEMA,
            "description": "Findings from public research on the web, including fact-checking sites and news articles. Leave empty if no relevant information is found.",
        },
        "documents": {
            "type": "ARRAY",
            "items": LINK_SCHEMA,
            "description": "Links to relevant source documents or official reports found during the analysis. Leave empty if none are found.",
        },
        "sources": {
            "type": "ARRAY",
            "items": LINK_SCHEMA,
            "description": "A list of primary sources used for verification, including the original source of the media if found.",
        },
    },
    "required": ["trustScore", "status", "summary", "findings"],
}
