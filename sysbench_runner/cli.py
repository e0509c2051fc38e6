import logging
from datetime import datetime

from sysbench_runner import __version__
from sysbench_runner.config import format_size, parse_args
from sysbench_runner.errors import SysbenchRunnerError
from sysbench_runner.installer import ensure_sysbench
from sysbench_runner.logger import add_file_handler, set_logger
from sysbench_runner.precheck import check_disk_space, prepare_work_dir
from sysbench_runner.report import measured, write_csv, write_xlsx
from sysbench_runner.runner import BenchmarkRunner, format_duration


def write_reports(config, results, stamp):
    if not measured(results):
        return
    write_csv(results, config.log_dir / f"report_{stamp}.csv")
    if config.xlsx:
        write_xlsx(results, config.log_dir / f"report_{stamp}.xlsx")
    if config.plot:
        from sysbench_runner.visualizer import generate_plot

        generate_plot(results, config.plot, config.log_dir / f"report_{stamp}_{config.plot}.png")


def main(argv=None) -> int:
    config = parse_args(argv)
    logger = set_logger(level=logging.DEBUG if config.debug else logging.INFO)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    file_handler = None

    try:
        prepare_work_dir(config)
        log_file = config.log_dir / f"sysbench_{stamp}.log"
        file_handler = add_file_handler(logger, log_file)
        logger.info(f"sysbench-runner {__version__}, log file: {log_file}")
        if config.cleanup_only:
            logger.info(f"Cleanup only in {config.work_dir}")
        else:
            logger.info(
                f"Work dir: {config.work_dir}, file size: {format_size(config.file_size)}, "
                f"modes: {','.join(config.modes)}, {format_duration(config.run_time)} each, delay: {config.delay}s"
            )

        check_disk_space(config)
        ensure_sysbench()

        results = BenchmarkRunner(config, log_file).run()
        write_reports(config, results, stamp)
        logger.info("Benchmark complete.")
        return 0
    except SysbenchRunnerError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 1
    finally:
        if file_handler is not None:
            logger.removeHandler(file_handler)
            file_handler.close()


if __name__ == "__main__":
    raise SystemExit(main())
