"""All prompt templates for AI gateway calls."""

from models.schemas.feedback import Tip
from models.schemas.messages import ChatMessage, FilePart, TextPart

FEEDBACK_FORMAT = """interface Feedback {
  overallScore: number; // max 100
  ATS: {
    score: number; // rate based on ATS suitability
    tips: {
      type: "good" | "improve";
      tip: string; // give 3-4 tips
    }[];
  };
  toneAndStyle: {
    score: number; // max 100
    tips: {
      type: "good" | "improve";
      tip: string; // make it a short "title" for the actual explanation
      explanation: string; // explain in detail here
    }[]; // give 3-4 tips
  };
  content: {
    score: number; // max 100
    tips: {
      type: "good" | "improve";
      tip: string;
      explanation: string;
    }[]; // give 3-4 tips
  };
  structure: {
    score: number; // max 100
    tips: {
      type: "good" | "improve";
      tip: string;
      explanation: string;
    }[]; // give 3-4 tips
  };
  skills: {
    score: number; // max 100
    tips: {
      type: "good" | "improve";
      tip: string;
      explanation: string;
    }[]; // give 3-4 tips
  };
}"""

SUGGESTION_FORMAT = """interface AISuggestion {
  title?: string;
  suggestedEdits: string[];        // max 3 short bullets
  beforeAfter?: { before: string; after: string }[]; // exact resume line changes
  sampleLines: string[];           // 1-2 paste-ready lines
  quickSwaps?: { from: string; to: string[] }[];
  notes?: string;
}"""


def build_feedback_prompt(company_name: str, job_title: str, job_description: str) -> str:
    """Bulk review call: score every category and list good/improve tips."""
    company_line = f"The company is: {company_name}\n" if company_name else ""

    return f"""You are an expert in ATS (Applicant Tracking System) and resume analysis.
Please analyze and rate this resume and suggest how to improve it.
The rating can be low if the resume is bad.
Be thorough and detailed. Don't be afraid to point out any mistakes or areas for improvement.
If there is a lot to improve, don't hesitate to give low scores. This is to help the user to improve their resume.
If available, use the job description for the job user is applying to, to give more detailed feedback.
If provided, take the job description into consideration.
{company_line}The job title is: {job_title}
The job description is: {job_description}

Provide the feedback using the following format:
{FEEDBACK_FORMAT}

Return the analysis as a JSON object, without any other text and without the backticks.
Do not include any other text or comments."""


def build_suggestion_prompt(tip: Tip) -> str:
    """Per-tip call: concrete, paste-ready edits for one improve-tip."""
    return f"""Return ONLY valid JSON that matches this TypeScript interface exactly.
Do not include explanations, markdown, or extra text.

{SUGGESTION_FORMAT}

You are improving a resume.

Rules:
- Refer to the attached resume when possible.
- Suggest ONLY concrete, actionable edits.
- Keep suggestions short and specific.
- Do NOT repeat the tip or explanation.
- Prefer showing exact line replacements.

Context:
Tip: "{tip.tip}"
Issue: "{tip.explanation}"

Return the AISuggestion JSON only."""


def build_feedback_messages(
    resume_path: str, company_name: str, job_title: str, job_description: str
) -> list[ChatMessage]:
    prompt = build_feedback_prompt(company_name, job_title, job_description)
    return [ChatMessage(role="user", content=[FilePart(path=resume_path), TextPart(text=prompt)])]


def build_suggestion_messages(tip: Tip, resume_path: str | None = None) -> list[ChatMessage]:
    """The resume file is attached ahead of the instruction when a reference is known."""
    content = []
    if resume_path:
        content.append(FilePart(path=resume_path))
    content.append(TextPart(text=build_suggestion_prompt(tip)))
    return [ChatMessage(role="user", content=content)]
