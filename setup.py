from setuptools import setup

setup(
    name='ARMS',
    version="0.1.0",
    packages=[
                'ARMS',
                'ARMS.sampler'
            ],
    package_dir = {
        'ARMS':'src/ARMS',
        'ARMS.sampler':'src/ARMS/sampler'
        },
    license='MIT',
    description='A python implementation of Adaptive Rejection Metropolis Sampling.',
    install_requires=['numpy',
                      'tqdm'],
    extras_require={'test': ['pytest']},
    classifiers=[
                'Intended Audience :: Developers',
                'Intended Audience :: Science/Research',
                'Programming Language :: Python :: 3',
                ],
        )
