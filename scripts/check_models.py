import argparse
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from google import genai

from recipebook.app.config import settings


def list_generation_models(client: genai.Client) -> list[str]:
    names: list[str] = []
    for model in client.models.list():
        actions = getattr(model, "supported_actions", None) or []
        if "generateContent" in actions:
            names.append(model.name.replace("models/", ""))
    return names


def main() -> None:
    parser = argparse.ArgumentParser(description="Check which configured Gemini models are available")
    parser.add_argument("--say-hello", action="store_true", help="Send a tiny prompt to every configured model")
    args = parser.parse_args()

    api_key = settings.gemini_api_key
    if not api_key:
        raise SystemExit("GEMINI_API_KEY not configured")

    client = genai.Client(api_key=api_key)
    available = set(list_generation_models(client))
    print("available models:", len(available))

    for model_name in settings.GEMINI_MODELS:
        status = "ok" if model_name in available else "MISSING"
        print(f"{model_name}: {status}")
        if args.say_hello and model_name in available:
            try:
                response = client.models.generate_content(model=model_name, contents="Say hello")
                print("  reply:", (response.text or "").strip()[:80])
            except Exception as error:
                print("  failed:", error)


if __name__ == "__main__":
    main()
