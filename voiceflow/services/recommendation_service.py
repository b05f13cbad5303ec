from voiceflow.config.constants import MAX_THREADS, MEMORY_MODEL_THRESHOLDS, SMALLEST_MODEL
from voiceflow.schemas.hardware import HardwareProfile
from voiceflow.schemas.recommendation import Backend, ModelSize, Recommendation


class RecommendationService:
    """
    Derives a whisper.cpp configuration from a HardwareProfile.

    Pure and deterministic: the same profile always yields the same
    recommendation, and no input is rejected.
    """

    @staticmethod
    def recommend(profile: HardwareProfile) -> Recommendation:
        return Recommendation(
            use_acceleration=profile.has_gpu,
            thread_count=RecommendationService.thread_count(profile.cpu.physical_cores),
            model_size=RecommendationService.model_size(profile.memory.total_bytes),
            backend=RecommendationService.backend(profile),
        )

    @staticmethod
    def thread_count(physical_cores: int) -> int:
        return max(1, min(physical_cores, MAX_THREADS))

    @staticmethod
    def model_size(total_memory_bytes: int) -> ModelSize:
        for threshold, size in MEMORY_MODEL_THRESHOLDS:
            if total_memory_bytes >= threshold:
                return ModelSize(size)
        return ModelSize(SMALLEST_MODEL)

    @staticmethod
    def backend(profile: HardwareProfile) -> Backend:
        if not profile.has_gpu:
            return Backend.CPU
        gpu = profile.gpu
        if gpu.supports_cuda:
            return Backend.CUDA
        if gpu.supports_metal:
            return Backend.METAL
        # An accelerator with no recognised API still gets the generic path
        return Backend.OPENCL


recommend = RecommendationService.recommend
