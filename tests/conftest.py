import os

import hypothesis


default_settings = hypothesis.settings(deadline=10000, max_examples=50)
hypothesis.settings.register_profile("default", default_settings)

ci_settings = hypothesis.settings(deadline=20000, max_examples=500)
hypothesis.settings.register_profile("ci", ci_settings)

hypothesis.settings.load_profile(
    os.environ.get("HYPOTHESIS_PROFILE", "default")
)
