import os
import glob
from setuptools import setup, Extension
from Cython.Build import cythonize

# --- CONFIGURATION ---
# The engine is plain Python; set LOGICSIM_COMPILE=1 to build it with Cython
source_dir = "logicsim"
compiled = ["Gates", "Rank", "Circuit", "IC"]

extensions = []

if os.environ.get("LOGICSIM_COMPILE") == "1":
    for source in glob.glob(os.path.join(source_dir, "*.py")):
        module_name = os.path.basename(source)[:-3]
        if module_name not in compiled:
            continue
        ext = Extension(
            f"{source_dir}.{module_name}",
            sources=[source],
            language="c",
            extra_compile_args=["-O2"],
        )
        extensions.append(ext)

# --- BUILD ---
setup(
    ext_modules=cythonize(extensions, compiler_directives={'language_level': "3"}) if extensions else [],
)
