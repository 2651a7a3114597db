from __future__ import annotations

from .persist_models import RECIPE_CATEGORIES

ML_TO_CUP_CONVERSIONS = (
    ("240 mL", "1 cup"),
    ("180 mL", "3/4 cup"),
    ("120 mL", "1/2 cup"),
    ("80 mL", "1/3 cup"),
    ("60 mL", "1/4 cup"),
    ("15 mL", "1 tbsp"),
    ("5 mL", "1 tsp"),
)

RECIPE_EXTRACTION_PROMPT = """
You are a recipe extraction expert. Extract structured recipe data from the following text (which may be unstructured or HTML content).

INPUT:
{content}
{source_section}
INSTRUCTIONS:
1. Extract and structure the recipe information into a consistent template.
2. STRICTLY use only the information provided in the input. DO NOT hallucinate or invent ingredients or steps.
3. If the input lists ingredients but no steps, still return the recipe with "steps" set to "1. Steps not provided in the source." and explain in the notes that the steps were missing.
4. If the input does not contain a recipe at all, return ONLY a JSON object with an "error" field explaining why.

FORMATTING RULES:

INGREDIENTS:
- Format each line as: "Ingredient – quantity" (use an en-dash '–' separator).
- PRESERVE DUAL UNITS if provided (e.g. "1 cup (120g)"). Do not remove the metric/gram equivalent if the cup measurement exists.
- Convert mL to cups using this table: {conversions}.
- List ALL ingredients in a single flat list.
- EXCEPTION: If there are marination ingredients, list "Marination" as a header line, then list marination ingredients below it. Otherwise, NO headers like "For the sauce" or "A/B/C".
- Example: "All-purpose flour – 2 cups"
- Example: "Water – 1 cup" (NOT "Water – 240 mL")
- DO NOT output "null" or "undefined" for quantity. If quantity is missing, just output "Ingredient – ".

STEPS:
- Number all steps (1., 2., 3., etc.).
- ALWAYS prefer volume units (cups, tbsp, tsp) inside steps.
- Repeat ingredient quantities inside the steps (e.g., "Add 1 cup flour and 2 tbsp sugar to the bowl").
- Break complex actions into multiple steps.
- Clean up messy narrative wording to be concise and clear.

NOTES:
- Add useful tips, variations, or optional upgrades from the original recipe.
- If there are "optional additions", "variations", or "upgrades" mentioned, include them here.
- If the input came from a URL, include "Source: [URL]" at the end of the notes.
- Remove duplicate or conflicting information.

GENERAL:
- NO bold, italics or other emphasis markup anywhere.
- Always produce clean, copy-ready output.
- Scale recipes only if the input explicitly asks for it, otherwise keep original quantities.
- Categorize the recipe as exactly one of: {categories}.
- Estimate prep and cook times in minutes if not explicitly stated.
- If cuisine type is apparent, include it.

RESPOND ONLY WITH VALID JSON in this exact format (no markdown, no code fences, no extra text):
{{
  "title": "Recipe name",
  "category": "Category name",
  "cuisine": "Cuisine type or null",
  "servings": "Number of servings as text (e.g., '4 servings')",
  "prep_time_minutes": number or null,
  "cook_time_minutes": number or null,
  "ingredients": "Flour – 1 cup\\nSugar – 2 tbsp\\n...",
  "steps": "1. Preheat oven to 350°F\\n2. Mix 1 cup flour and 2 tbsp sugar...\\n...",
  "source_url": "Original URL or source name if known, otherwise null",
  "notes": "Use room temperature eggs.\\nSource: [URL if available]"
}}
"""


def build_recipe_prompt(content: str, source_url: str | None = None) -> str:
    source_section = f"\nSOURCE URL:\n{source_url}\n" if source_url else ""
    conversions = ", ".join(f"{ml} = {cup}" for ml, cup in ML_TO_CUP_CONVERSIONS)
    return RECIPE_EXTRACTION_PROMPT.format(
        content=content,
        source_section=source_section,
        conversions=conversions,
        categories=", ".join(RECIPE_CATEGORIES),
    )
