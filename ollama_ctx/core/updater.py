"""
Pull installed models to pick up upstream updates.
"""
import logging
from ollama_ctx.errors import RegistryError

logger = logging.getLogger("ollama_ctx.core.updater")

def pull_models(registry, model_name=None):
    """
    Pull one model, or every installed model.

    Args:
        registry (ModelRegistry): Registry client
        model_name (str, optional): Only pull this model

    Returns:
        tuple: (success, pulled_models, failed_models)
    """
    if model_name:
        models = [model_name]
    else:
        logger.info("Fetching currently installed models from Ollama...")
        models = registry.list_model_names()
        if not models:
            logger.error("No Ollama models found.")
            return False, [], []
        logger.info(f"Found {len(models)} installed models.")

    pulled = []
    failed = []
    for model in models:
        logger.info(f"--- Pulling latest for {model} ---")
        try:
            registry.pull(model)
            pulled.append(model)
        except RegistryError as e:
            logger.error(f"Error pulling {model}: {e}")
            failed.append(model)

    logger.info(f"Pulled models: {pulled}")
    if failed:
        logger.warning(f"Failed models: {failed}")
    logger.info("--- All models checked/updated. ---")

    return not failed, pulled, failed
